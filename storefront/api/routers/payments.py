# storefront/api/routers/payments.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_payment_gateway
from storefront.domain.errors import ExternalServiceError
from storefront.domain.schemas import CreatePaymentOrderIn, VerifyPaymentIn, VerifyPaymentOut
from storefront.services import payment_verifier
from storefront.services.payment_gateway import PaymentGatewayClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-order")
def create_payment_order(payload: CreatePaymentOrderIn, gateway: PaymentGatewayClient = Depends(get_payment_gateway)):
    # passthrough of the gateway's order object
    return gateway.create_payment_order(payload.amount, payload.currency, payload.user_id)


@router.post("/verify-payment", response_model=VerifyPaymentOut)
def verify_payment(payload: VerifyPaymentIn, gateway: PaymentGatewayClient = Depends(get_payment_gateway)):
    if not gateway.key_secret:
        raise ExternalServiceError("Payment gateway secret is not configured")

    valid = payment_verifier.verify(payload.order_id, payload.payment_id, payload.signature, gateway.key_secret)
    if not valid:
        logger.warning(f"Signature mismatch for gateway order {payload.order_id}")

    message = "Payment verified" if valid else "Payment signature is invalid"
    return {"success": True, "message": message, "valid": valid}
