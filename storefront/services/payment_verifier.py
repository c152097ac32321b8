# storefront/services/payment_verifier.py
import hashlib
import hmac


def expected_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


def verify(order_id: str, payment_id: str, provided_signature: str, secret: str) -> bool:
    """Check a gateway callback signature. Constant-time comparison."""
    expected = expected_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode(), (provided_signature or "").encode())
