# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identifier_generator, get_notification_service
from storefront.data.database import get_db
from storefront.domain.schemas import (
    FindOrdersIn,
    OrderEnvelope,
    OrderListEnvelope,
    PaymentStatusUpdateIn,
    PlaceOrderIn,
    PlaceOrderOut,
    StatusUpdateIn,
)
from storefront.services.identifier_service import IdentifierGenerator
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    generator: IdentifierGenerator = Depends(get_identifier_generator),
    notification_service: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(db, generator=generator, notification_service=notification_service)


@router.post("/place-order", response_model=PlaceOrderOut)
def place_order(payload: PlaceOrderIn, svc: OrderService = Depends(get_service)):
    """
    Creates the order from a cart snapshot. The caller is expected to have
    verified the payment already; paymentStatus is stored as sent.
    """
    result = svc.place_order(
        user_id=payload.user_id,
        address=payload.address,
        price=payload.price,
        products_ordered=payload.products_ordered,
        payment_status=payload.payment_status.value,
        date=payload.date,
        time=payload.time,
        status=payload.status.value if payload.status else None,
        payment_method=payload.payment_method.value if payload.payment_method else None,
    )

    message = "Order placed successfully"
    if result["notification"] != "sent":
        message += ", but the confirmation email could not be sent"
    return {"success": True, "message": message, **result}


@router.post("/find-my-order", response_model=OrderListEnvelope)
def find_my_orders(payload: FindOrdersIn, svc: OrderService = Depends(get_service)):
    orders = svc.get_orders_for_user(payload.user_id)
    message = f"{len(orders)} orders found" if orders else "No orders found for this user"
    return {"success": True, "message": message, "orders": orders}


@router.get("/", response_model=OrderListEnvelope)
def list_orders(svc: OrderService = Depends(get_service)):
    orders = svc.list_orders()
    return {"success": True, "message": f"{len(orders)} orders", "orders": orders}


@router.get("/{order_id}", response_model=OrderEnvelope)
def get_order(order_id: str, svc: OrderService = Depends(get_service)):
    return {"success": True, "message": "Order found", "order": svc.get_order(order_id)}


@router.put("/{order_id}/status", response_model=OrderEnvelope)
def update_status(order_id: str, payload: StatusUpdateIn, svc: OrderService = Depends(get_service)):
    order = svc.update_status(order_id, payload.status.value)
    return {"success": True, "message": f"Order status changed to {order['status']}", "order": order}


@router.put("/{order_id}/payment-status", response_model=OrderEnvelope)
def update_payment_status(order_id: str, payload: PaymentStatusUpdateIn, svc: OrderService = Depends(get_service)):
    order = svc.update_payment_status(order_id, payload.payment_status.value)
    return {"success": True, "message": "Payment status updated", "order": order}
