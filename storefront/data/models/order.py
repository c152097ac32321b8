from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, JSON

from storefront.data.database import Base
from storefront.domain.order_status import OrderStatus, PaymentStatus


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_id = Column(String(6), nullable=False, unique=True, index=True)
    tracking_id = Column(String(12), nullable=False, unique=True)
    user_id = Column(String(64), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False)
    address = Column(String(500), nullable=False)
    date = Column(String(32), nullable=True)
    time = Column(String(32), nullable=True)

    # snapshot, never linked back to the cart
    product_ids = Column(JSON, nullable=False, default=list)
    price = Column(Numeric(12, 2), nullable=False)

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
