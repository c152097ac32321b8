# storefront/services/otp_service.py
import secrets

import redis

from storefront.services.lock_service import COMPARE_AND_DELETE_LUA, make_redis
from storefront.utils.retry import redis_retry
from storefront.utils.settings import OTP_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OtpStore:
    """One-time passcodes kept in redis under otp:<email> with an expiry."""

    def __init__(self, client: redis.Redis | None = None, ttl: int = OTP_TTL_SECONDS):
        self.redis = client if client is not None else make_redis()
        self.ttl = ttl

    @staticmethod
    def key(email: str) -> str:
        return f"otp:{email.lower()}"

    @redis_retry()
    def issue(self, email: str) -> str:
        otp = str(secrets.randbelow(900000) + 100000)
        # a new code replaces the previous one
        self.redis.set(self.key(email), otp, ex=self.ttl)
        logger.info(f"Issued OTP for {email}, valid {self.ttl}s")
        return otp

    @redis_retry()
    def consume(self, email: str, otp: str) -> bool:
        """True only for the first matching use of an unexpired code."""
        return bool(self.redis.eval(COMPARE_AND_DELETE_LUA, 1, self.key(email), otp))

    @redis_retry()
    def has_pending(self, email: str) -> bool:
        return bool(self.redis.exists(self.key(email)))
