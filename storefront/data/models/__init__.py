# all models imported here so SQLAlchemy registers them in Base.metadata
from storefront.data.models.user import UserModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.product import ProductModel
from storefront.data.models.coupon import CouponModel
from storefront.data.models.seller import SellerModel
from storefront.data.models.identifier import IdentifierReservationModel

__all__ = [
    "UserModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "ProductModel",
    "CouponModel",
    "SellerModel",
    "IdentifierReservationModel",
]
