from sqlalchemy import Column, Integer, String

from storefront.data.database import Base


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    discount_percentage = Column(Integer, nullable=False)
