# storefront/domain/order_status.py
from enum import Enum

from storefront.domain.errors import InvalidTransitionError, ValidationError


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"
    REFUNDED = "Refunded"
    PENDING = "Pending"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    NET_BANKING = "Net Banking"
    UPI = "UPI"
    COD = "COD"


# forward only, Delivered and Cancelled are terminal
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def coerce(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field} '{value}'",
            details={field: f"must be one of: {allowed}"},
        ) from None


def is_terminal(status: OrderStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def ensure_transition(current: str, target: str) -> OrderStatus:
    """Return the target status or raise if the move is not allowed."""
    src = coerce(OrderStatus, current, "status")
    dst = coerce(OrderStatus, target, "status")

    if dst not in ALLOWED_TRANSITIONS[src]:
        raise InvalidTransitionError(
            f"Cannot move order from {src.value} to {dst.value}",
            details={"from": src.value, "to": dst.value},
        )
    return dst
