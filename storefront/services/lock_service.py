# storefront/services/lock_service.py
import uuid
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError
from tenacity import Retrying, retry_if_result, stop_after_delay, wait_random

from storefront.domain.errors import ConflictError, ExternalServiceError
from storefront.utils.retry import redis_retry
from storefront.utils.settings import (
    CART_LOCK_TTL_SECONDS,
    CART_LOCK_WAIT_SECONDS,
    EXTERNAL_TIMEOUT_SECONDS,
    REDIS_URL,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# GET + compare + DEL as one step; Lua runs atomically inside redis
COMPARE_AND_DELETE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


def make_redis(url: str | None = None) -> redis.Redis:
    return redis.Redis.from_url(
        url or REDIS_URL,
        decode_responses=True,
        socket_timeout=EXTERNAL_TIMEOUT_SECONDS,
        socket_connect_timeout=EXTERNAL_TIMEOUT_SECONDS,
    )


class LockService:
    """
    Per-user cart lock on redis.

    SET key token NX EX ttl takes the lock, only the holder of the token
    may delete it, and the TTL frees it if the holder dies.
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
        ttl: int = CART_LOCK_TTL_SECONDS,
        wait: float = CART_LOCK_WAIT_SECONDS,
    ):
        self.redis = client if client is not None else make_redis(url)
        self.ttl = ttl
        self.wait = wait

    @staticmethod
    def cart_key(user_id: str) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def try_acquire(self, key: str, token: str, ttl: int) -> bool:
        # SET cart:u1:lock "<token>" NX EX 10
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        res = self.redis.eval(COMPARE_AND_DELETE_LUA, 1, key, token)
        return bool(res)

    def acquire(self, key: str, token: str, ttl: int, wait: float) -> bool:
        """Poll until the lock is ours or ``wait`` seconds pass."""
        retrying = Retrying(
            stop=stop_after_delay(wait),
            wait=wait_random(min=0.01, max=0.05),
            retry=retry_if_result(lambda acquired: not acquired),
            retry_error_callback=lambda state: False,
        )
        return retrying(self.try_acquire, key, token, ttl)

    @contextmanager
    def cart_lock(self, user_id: str):
        key = self.cart_key(user_id)
        token = uuid.uuid4().hex

        try:
            acquired = self.acquire(key, token, self.ttl, self.wait)
        except RedisError as e:
            logger.error(f"Redis unavailable while locking {key}: {e}")
            raise ExternalServiceError("Lock service unavailable") from e

        if not acquired:
            raise ConflictError(
                "Cart is being modified by another request, try again",
                details={"userId": user_id},
            )

        logger.debug(f"Acquired {key}")
        try:
            yield token
        finally:
            try:
                self.release(key, token)
            except RedisError as e:
                # TTL will drop it anyway
                logger.warning(f"Failed to release {key}: {e}")
