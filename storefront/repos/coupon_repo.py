from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[CouponModel]:
        return list(self.db.execute(select(CouponModel).order_by(CouponModel.id)).scalars())

    def get_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(CouponModel.code == code)
        ).scalar_one_or_none()

    def add(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def delete(self, coupon: CouponModel) -> None:
        self.db.delete(coupon)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
