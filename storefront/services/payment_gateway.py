# storefront/services/payment_gateway.py
import requests
from requests import RequestException

from storefront.domain.errors import ExternalServiceError
from storefront.utils.retry import http_retry
from storefront.utils.settings import (
    EXTERNAL_TIMEOUT_SECONDS,
    PAYMENT_GATEWAY_URL,
    PAYMENT_KEY_ID,
    PAYMENT_KEY_SECRET,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentGatewayClient:
    def __init__(
        self,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        timeout: float = EXTERNAL_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or PAYMENT_GATEWAY_URL).rstrip("/")
        self.key_id = key_id if key_id is not None else PAYMENT_KEY_ID
        self.key_secret = key_secret if key_secret is not None else PAYMENT_KEY_SECRET
        self.timeout = timeout

    @http_retry()
    def _post(self, path: str, payload: dict) -> dict:
        url = f"{self.base_url}{path}"
        logger.info(f"PaymentGatewayClient POST {url}")

        resp = requests.post(
            url,
            json=payload,
            auth=(self.key_id, self.key_secret),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def create_payment_order(self, amount: int, currency: str = "INR", user_id: str | None = None) -> dict:
        """Amount is in the smallest currency unit (paise for INR)."""
        if not self.key_id or not self.key_secret:
            raise ExternalServiceError("Payment gateway is not configured")

        try:
            return self._post(
                "/orders",
                {"amount": amount, "currency": currency, "notes": {"user": user_id}},
            )
        except RequestException as e:
            logger.error(f"Creating gateway order failed: {e}")
            raise ExternalServiceError("Failed to create payment order") from e
