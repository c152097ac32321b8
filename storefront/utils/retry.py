# storefront/utils/retry.py
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
import requests
import redis

# only transport failures are retried, an HTTP error status is an answer
TRANSIENT_HTTP_ERRORS = (requests.ConnectionError, requests.Timeout)
TRANSIENT_REDIS_ERRORS = (redis.ConnectionError, redis.TimeoutError)


def http_retry():
    # gateway calls sit inside a user request, keep the total wait short
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=1),
        retry=retry_if_exception_type(TRANSIENT_HTTP_ERRORS),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_exception_type(TRANSIENT_REDIS_ERRORS),
    )


def smtp_retry():
    # smtplib.SMTPException subclasses OSError, socket timeouts too
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(OSError),
    )
