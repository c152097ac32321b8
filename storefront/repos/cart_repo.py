# storefront/repos/cart_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart import CartModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel)
            .options(selectinload(CartModel.items))
            .where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_by_cart_id(self, cart_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel)
            .options(selectinload(CartModel.items))
            .where(CartModel.cart_id == cart_id)
        ).scalar_one_or_none()

    def add(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def delete_cart(self, user_id: str) -> int:
        cart = self.get_by_user(user_id)
        if not cart:
            return 0
        self.db.delete(cart)
        return 1

    def bump_version(self, cart_pk: int, old_version: int) -> int:
        """Guarded UPDATE, zero rows means someone else committed first."""
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_pk, CartModel.version == old_version)
            .values(version=old_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, cart: CartModel):
        self.db.refresh(cart)
        return cart
