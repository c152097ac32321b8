from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.seller import SellerModel


class SellerRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> SellerModel | None:
        return self.db.execute(
            select(SellerModel).where(SellerModel.email == email)
        ).scalar_one_or_none()

    def add(self, seller: SellerModel) -> SellerModel:
        self.db.add(seller)
        self.db.commit()
        self.db.refresh(seller)
        return seller

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
