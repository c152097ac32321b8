# storefront/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.code_spaces import ORDER_ID, TRACKING_ID
from storefront.domain.errors import NotFoundError, PersistenceError, ValidationError
from storefront.domain.order_status import OrderStatus, PaymentMethod, PaymentStatus, coerce, ensure_transition
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.identifier_service import IdentifierGenerator
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")
MAX_PRICE = Decimal(10) ** 10


def extract_product_ids(products_ordered: Iterable[Any]) -> List[str]:
    product_ids = []
    for index, item in enumerate(products_ordered or []):
        if isinstance(item, str):
            product_id = item
        elif isinstance(item, Mapping):
            product_id = item.get("product_id", item.get("productId"))
        else:
            product_id = getattr(item, "product_id", None)

        if not product_id:
            raise ValidationError(
                "Every ordered product needs a productId",
                details={f"productsOrdered.{index}.productId": "required"},
            )
        product_ids.append(str(product_id))
    return product_ids


def _check_price(price: Any) -> Decimal:
    # stored as Numeric(12, 2), anything finer would be rounded silently
    try:
        price = Decimal(str(price))
    except InvalidOperation:
        price = None
    if (
        price is None
        or not price.is_finite()
        or price < 0
        or price >= MAX_PRICE
        or price != price.quantize(CENT)
    ):
        raise ValidationError(
            "Price must be a non-negative amount with at most 2 decimal places",
            details={"price": "invalid amount"},
        )
    return price


class OrderService:
    """
    Turns a cart snapshot into an order.

    Lookups and validation happen before anything is written, the order row
    is written in a single commit, and the confirmation mail comes last:
    a mail failure is reported but never undoes the order.
    """

    def __init__(
        self,
        db: Session,
        generator: IdentifierGenerator,
        notification_service: NotificationService,
    ):
        self.repo = OrderRepo(db)
        self.user_repo = UserRepo(db)
        self.generator = generator
        self.notification_service = notification_service

    def place_order(
        self,
        user_id: str,
        address: str,
        price: Decimal,
        products_ordered: Iterable[Any],
        payment_status: str = PaymentStatus.PENDING.value,
        date: str | None = None,
        time: str | None = None,
        status: str | None = None,
        payment_method: str | None = None,
    ) -> Dict[str, Any]:
        # 1. user
        user = self.user_repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found", details={"userId": user_id})

        # 2. snapshot of product ids
        product_ids = extract_product_ids(products_ordered)
        if not product_ids:
            raise ValidationError("Order must contain at least one product", details={"productsOrdered": "empty"})

        price = _check_price(price)
        payment_status = coerce(PaymentStatus, payment_status, "paymentStatus").value
        if payment_method is not None:
            payment_method = coerce(PaymentMethod, payment_method, "paymentMethod").value
        if status is not None and coerce(OrderStatus, status, "status") is not OrderStatus.PENDING:
            logger.warning(f"Ignoring requested status {status} for new order of user {user_id}")

        # 3. identifiers
        order_id = self.generator.allocate(ORDER_ID)
        tracking_id = self.generator.allocate(TRACKING_ID)

        # 4. persist
        order = OrderModel(
            order_id=order_id,
            tracking_id=tracking_id,
            user_id=user_id,
            name=user.name,
            email=user.email,
            address=address,
            date=date,
            time=time,
            product_ids=list(product_ids),
            price=price,
            status=OrderStatus.PENDING.value,
            payment_status=payment_status,
            payment_method=payment_method,
        )

        try:
            self.repo.add(order)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Saving order {order_id} for user {user_id} failed: {e}")
            raise PersistenceError("Error placing order") from e

        logger.info(f"Order {order_id} placed for user {user_id}, tracking {tracking_id}")

        # 5. confirmation, best effort
        sent = self.notification_service.send_order_confirmation(
            user.email,
            {
                "order_id": order_id,
                "tracking_id": tracking_id,
                "name": user.name,
                "date": date,
                "time": time,
                "address": address,
                "price": price,
            },
        )

        return {
            "order_id": order_id,
            "tracking_id": tracking_id,
            "notification": "sent" if sent else "failed",
        }

    # query
    def get_order(self, order_id: str) -> Dict[str, Any]:
        return self._to_dict(self._get(order_id))

    def get_orders_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        return [self._to_dict(o) for o in self.repo.list_for_user(user_id)]

    def list_orders(self) -> List[Dict[str, Any]]:
        return [self._to_dict(o) for o in self.repo.list_all()]

    # lifecycle
    def update_status(self, order_id: str, new_status: str) -> Dict[str, Any]:
        order = self._get(order_id)
        target = ensure_transition(order.status, new_status)

        previous = order.status
        order.status = target.value
        self._save(order)

        logger.info(f"Order {order_id} status {previous} -> {target.value}")
        return self._to_dict(order)

    def update_payment_status(self, order_id: str, payment_status: str) -> Dict[str, Any]:
        order = self._get(order_id)
        order.payment_status = coerce(PaymentStatus, payment_status, "paymentStatus").value
        self._save(order)

        logger.info(f"Order {order_id} payment status -> {order.payment_status}")
        return self._to_dict(order)

    def _get(self, order_id: str) -> OrderModel:
        order = self.repo.get_by_order_id(order_id)
        if not order:
            raise NotFoundError("Order not found", details={"orderId": order_id})
        return order

    def _save(self, order: OrderModel) -> None:
        order.updated_at = datetime.now(timezone.utc)
        try:
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceError(f"Could not update order {order.order_id}") from e

    @staticmethod
    def _to_dict(order: OrderModel) -> Dict[str, Any]:
        return {
            "order_id": order.order_id,
            "tracking_id": order.tracking_id,
            "user_id": order.user_id,
            "name": order.name,
            "email": order.email,
            "address": order.address,
            "date": order.date,
            "time": order.time,
            "product_ids": list(order.product_ids or []),
            "price": order.price,
            "status": order.status,
            "payment_status": order.payment_status,
            "payment_method": order.payment_method,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }
