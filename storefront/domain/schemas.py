# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.domain.order_status import OrderStatus, PaymentMethod, PaymentStatus

# no whitespace anywhere, so CR/LF can never reach a mail header
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(ApiModel):
    success: bool = True
    message: str = ""


# ---------------------------------------------------------------- carts

class CartItemIn(ApiModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(1, gt=0)


class AddToCartIn(ApiModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    cart_id: str | None = Field(None, min_length=1, max_length=64)
    items: List[CartItemIn]


class GetCartIn(ApiModel):
    user_id: str | None = None
    cart_id: str | None = None


class UpdateQuantityIn(ApiModel):
    user_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class RemoveItemIn(ApiModel):
    user_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)


class CartItemOut(ApiModel):
    product_id: str
    quantity: int


class CartOut(ApiModel):
    user_id: str
    cart_id: str
    version: int
    items: List[CartItemOut]
    updated_at: datetime | None = None


class CartEnvelope(Envelope):
    cart: CartOut


class RemoveItemEnvelope(Envelope):
    removed: bool


# ---------------------------------------------------------------- orders

class OrderedProductIn(ApiModel):
    product_id: str = Field(..., min_length=1)
    quantity: int | None = Field(None, gt=0)


class PlaceOrderIn(ApiModel):
    user_id: str = Field(..., min_length=1)
    date: str | None = Field(None, max_length=32)
    time: str | None = Field(None, max_length=32)
    address: str = Field(..., min_length=1, max_length=500)
    # matches Numeric(12, 2)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    products_ordered: List[OrderedProductIn]
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod | None = None
    status: OrderStatus | None = None


class PlaceOrderOut(Envelope):
    order_id: str
    tracking_id: str
    notification: str


class FindOrdersIn(ApiModel):
    user_id: str = Field(..., min_length=1)


class OrderOut(ApiModel):
    order_id: str
    tracking_id: str
    user_id: str
    name: str
    email: str
    address: str
    date: str | None = None
    time: str | None = None
    product_ids: List[str]
    price: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod | None = None
    created_at: datetime
    updated_at: datetime


class OrderEnvelope(Envelope):
    order: OrderOut


class OrderListEnvelope(Envelope):
    orders: List[OrderOut]


class StatusUpdateIn(ApiModel):
    status: OrderStatus


class PaymentStatusUpdateIn(ApiModel):
    payment_status: PaymentStatus


# ---------------------------------------------------------------- payments

class CreatePaymentOrderIn(ApiModel):
    amount: int = Field(..., gt=0, description="Amount in the smallest currency unit")
    currency: str = Field("INR", min_length=3, max_length=3)
    user_id: str | None = None


class VerifyPaymentIn(ApiModel):
    order_id: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class VerifyPaymentOut(Envelope):
    valid: bool


# ---------------------------------------------------------------- products

class ProductOut(ApiModel):
    product_id: str | None
    name: str
    price: Decimal
    category: str | None = None
    in_stock_value: int
    sold_stock_value: int
    visibility: str


class ProductListEnvelope(Envelope):
    products: List[ProductOut]


class StockUpdateIn(ApiModel):
    product_id: str = Field(..., min_length=1)
    in_stock_value: int = Field(..., ge=0)
    sold_stock_value: int = Field(..., ge=0)


# ---------------------------------------------------------------- coupons

class CouponIn(ApiModel):
    code: str = Field(..., min_length=1, max_length=50)
    discount_percentage: int = Field(..., gt=0, le=100)


class CouponCodeIn(ApiModel):
    code: str = Field(..., min_length=1)


class CouponOut(ApiModel):
    code: str
    discount_percentage: int


class CouponEnvelope(Envelope):
    coupon: CouponOut
    broadcast_queued: bool


class CouponListEnvelope(Envelope):
    coupons: List[CouponOut]


class CouponVerifyOut(Envelope):
    discount_percentage: int


class CouponDeleteOut(Envelope):
    broadcast_queued: bool


# ---------------------------------------------------------------- sellers

class SellerSignupIn(ApiModel):
    email_id: str = Field(..., min_length=3, max_length=254, pattern=EMAIL_PATTERN)
    phone_number: str = Field(..., min_length=5, max_length=20)
    password: str = Field(..., min_length=8)


class SellerSignupOut(Envelope):
    seller_id: str


class SendOtpIn(ApiModel):
    email_id: str = Field(..., min_length=3, pattern=EMAIL_PATTERN)


class VerifyOtpIn(ApiModel):
    # optional on purpose, missing fields are reported one by one
    email_id: str | None = None
    otp: str | None = None


# ---------------------------------------------------------------- users

class UserCreate(ApiModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254, pattern=EMAIL_PATTERN)


class UserRead(ApiModel):
    user_id: str
    name: str
    email: str
    account_status: str
