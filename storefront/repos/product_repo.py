from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_product_id(self, product_id: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.product_id == product_id)
        ).scalar_one_or_none()

    def list_missing_ids(self) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel).where(ProductModel.product_id.is_(None)).order_by(ProductModel.id)
            ).scalars()
        )

    def list_assigned_ids(self) -> List[str]:
        return list(
            self.db.execute(
                select(ProductModel.product_id).where(ProductModel.product_id.is_not(None))
            ).scalars()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
