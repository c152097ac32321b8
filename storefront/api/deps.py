# storefront/api/deps.py
from functools import lru_cache

import redis
from fastapi import Depends

from storefront.services.identifier_service import IdentifierGenerator
from storefront.services.lock_service import LockService, make_redis
from storefront.services.mail_client import MailClient
from storefront.services.notification_service import NotificationService
from storefront.services.otp_service import OtpStore
from storefront.services.payment_gateway import PaymentGatewayClient


# one client/connection pool per process, overridden in tests
@lru_cache
def get_redis() -> redis.Redis:
    return make_redis()


@lru_cache
def get_mail_client() -> MailClient:
    return MailClient()


def get_lock_service(client: redis.Redis = Depends(get_redis)) -> LockService:
    return LockService(client=client)


def get_otp_store(client: redis.Redis = Depends(get_redis)) -> OtpStore:
    return OtpStore(client=client)


def get_identifier_generator() -> IdentifierGenerator:
    return IdentifierGenerator()


def get_notification_service(mail_client: MailClient = Depends(get_mail_client)) -> NotificationService:
    return NotificationService(mail_client=mail_client)


def get_payment_gateway() -> PaymentGatewayClient:
    return PaymentGatewayClient()
