from sqlalchemy import Column, Integer, String
from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False)
    account_status = Column(String(20), nullable=False, default="active")
