from sqlalchemy import Column, Integer, String, Boolean

from storefront.data.database import Base


class SellerModel(Base):
    __tablename__ = "sellers"

    id = Column(Integer, primary_key=True)
    seller_id = Column(String(10), nullable=False, unique=True, index=True)
    email = Column(String(254), nullable=False, unique=True)
    phone_number = Column(String(20), nullable=False)
    password_hash = Column(String(200), nullable=False)

    email_verified = Column(Boolean, nullable=False, default=False)
    phone_verified = Column(Boolean, nullable=False, default=False)
    business_name = Column(String(200), nullable=False, default="Not Available")
