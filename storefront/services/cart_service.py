# storefront/services/cart_service.py
import uuid
from typing import Any, Dict, Iterable, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.services.lock_service import LockService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartVersionConflict(ConflictError):
    pass


def version_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_random(min=0.01, max=0.1),
        retry=retry_if_exception_type(CartVersionConflict),
    )


def collapse_items(items: Iterable[Any]) -> Dict[str, int]:
    """
    Turn incoming line items into an ordered product_id -> quantity map.

    Items may be mappings (product_id/productId, quantity) or pydantic
    objects. A product repeated in one request keeps its last quantity.
    """
    collapsed: Dict[str, int] = {}
    for index, item in enumerate(items):
        if isinstance(item, Mapping):
            product_id = item.get("product_id", item.get("productId"))
            quantity = item.get("quantity")
        else:
            product_id = getattr(item, "product_id", None)
            quantity = getattr(item, "quantity", None)

        if not product_id:
            raise ValidationError("productId is required", details={f"items.{index}.productId": "required"})
        _check_quantity(quantity, field=f"items.{index}.quantity")

        collapsed.pop(product_id, None)
        collapsed[product_id] = quantity
    return collapsed


def _check_quantity(quantity: Any, field: str = "quantity") -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer", details={field: "must be > 0"})


class CartService:
    """
    Use cases for the per-user cart.

    Commands (merge, update_quantity, remove, delete) run under the user's
    redis lock and bump the cart version with a guarded UPDATE, so two
    writers can never both win. Queries (get_*) only read.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = CartRepo(db)
        self.lock_service = lock_service

    # query
    def get_by_user(self, user_id: str) -> Dict[str, Any]:
        cart = self.repo.get_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found for this user", details={"userId": user_id})
        return self._to_dict(cart)

    def get_by_cart_id(self, cart_id: str) -> Dict[str, Any]:
        cart = self.repo.get_by_cart_id(cart_id)
        if not cart:
            raise NotFoundError("Cart not found", details={"cartId": cart_id})
        return self._to_dict(cart)

    def get_cart(self, user_id: str | None = None, cart_id: str | None = None) -> Dict[str, Any]:
        if user_id:
            return self.get_by_user(user_id)
        if cart_id:
            return self.get_by_cart_id(cart_id)
        raise ValidationError(
            "userId or cartId is required",
            details={"userId": "required without cartId", "cartId": "required without userId"},
        )

    # commands
    def merge(self, user_id: str, items: Iterable[Any], cart_id: str | None = None) -> Dict[str, Any]:
        """
        Create the cart or overwrite quantities of the given products.

        Last write wins per product, quantities are never summed, so sending
        the same items twice leaves the cart unchanged. To add N more units
        read the current quantity first and send the total.
        """
        incoming = collapse_items(items)

        with self.lock_service.cart_lock(user_id):
            return self._merge(user_id, cart_id, incoming)

    def update_quantity(self, user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        _check_quantity(quantity)

        with self.lock_service.cart_lock(user_id):
            return self._update_quantity(user_id, product_id, quantity)

    def remove(self, user_id: str, product_id: str) -> bool:
        """Drop one line. Returns False (and writes nothing) when there is no such line."""
        with self.lock_service.cart_lock(user_id):
            return self._remove(user_id, product_id)

    def delete(self, user_id: str) -> None:
        with self.lock_service.cart_lock(user_id):
            deleted = self.repo.delete_cart(user_id)
            if not deleted:
                raise NotFoundError("Cart not found", details={"userId": user_id})
            self._commit()

        logger.info(f"Cart of user {user_id} deleted")

    # internals
    @version_retry()
    def _merge(self, user_id: str, cart_id: str | None, incoming: Dict[str, int]) -> Dict[str, Any]:
        cart = self.repo.get_by_user(user_id)

        if cart is None:
            return self._create(user_id, cart_id, incoming)

        existing = {item.product_id: item for item in cart.items}
        next_position = max((item.position for item in cart.items), default=-1) + 1

        for product_id, quantity in incoming.items():
            if product_id in existing:
                existing[product_id].quantity = quantity
            else:
                cart.items.append(
                    CartItemModel(product_id=product_id, quantity=quantity, position=next_position)
                )
                next_position += 1

        self._commit_versioned(cart)
        logger.info(f"Cart {cart.cart_id} of user {user_id} merged {len(incoming)} items, version {cart.version}")
        return self._to_dict(cart)

    def _create(self, user_id: str, cart_id: str | None, incoming: Dict[str, int]) -> Dict[str, Any]:
        cart = CartModel(user_id=user_id, cart_id=cart_id or uuid.uuid4().hex, version=1)
        cart.items = [
            CartItemModel(product_id=product_id, quantity=quantity, position=position)
            for position, (product_id, quantity) in enumerate(incoming.items())
        ]

        try:
            self.repo.add(cart)
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            if self.repo.get_by_user(user_id) is not None:
                # someone created it first, merge into theirs
                raise CartVersionConflict("Cart was created concurrently") from e
            raise ConflictError(
                "cartId is already in use",
                details={"cartId": cart.cart_id},
            ) from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceError("Could not save the cart") from e

        logger.info(f"Created cart {cart.cart_id} for user {user_id}")
        return self._to_dict(cart)

    @version_retry()
    def _update_quantity(self, user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        cart = self.repo.get_by_user(user_id)
        if cart is None:
            raise NotFoundError("Cart not found", details={"userId": user_id})

        item = next((i for i in cart.items if i.product_id == product_id), None)
        if item is None:
            raise NotFoundError("Product not found in the cart", details={"productId": product_id})

        item.quantity = quantity
        self._commit_versioned(cart)
        logger.info(f"Cart {cart.cart_id}: {product_id} quantity set to {quantity}")
        return self._to_dict(cart)

    @version_retry()
    def _remove(self, user_id: str, product_id: str) -> bool:
        cart = self.repo.get_by_user(user_id)
        if cart is None:
            logger.info(f"Remove {product_id}: user {user_id} has no cart, nothing to do")
            return False

        item = next((i for i in cart.items if i.product_id == product_id), None)
        if item is None:
            logger.info(f"Remove {product_id}: not in cart {cart.cart_id}, nothing to do")
            return False

        cart.items.remove(item)
        self._commit_versioned(cart)
        logger.info(f"Removed {product_id} from cart {cart.cart_id}")
        return True

    def _commit_versioned(self, cart: CartModel) -> None:
        old_version = cart.version
        try:
            self.repo.db.flush()
            rowcount = self.repo.bump_version(cart.id, old_version)

            # e.g. UPDATE carts SET version=3 WHERE id=1 AND version=2
            if rowcount == 0:
                self.repo.rollback()
                logger.warning(f"Version conflict on cart {cart.cart_id} (version {old_version})")
                raise CartVersionConflict("Cart was modified by another operation")

            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            raise ConflictError("Cart item conflicts with stored state") from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceError("Could not save the cart") from e

        self.repo.refresh(cart)

    def _commit(self) -> None:
        try:
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceError("Could not save the cart") from e

    @staticmethod
    def _to_dict(cart: CartModel) -> Dict[str, Any]:
        return {
            "user_id": cart.user_id,
            "cart_id": cart.cart_id,
            "version": cart.version,
            "items": [
                {"product_id": i.product_id, "quantity": i.quantity}
                for i in sorted(cart.items, key=lambda i: i.position)
            ],
            "updated_at": cart.updated_at,
        }
