from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    # assigned after creation by the identifier generator
    product_id = Column(String(64), nullable=True, unique=True, index=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=True)

    in_stock_value = Column(Integer, nullable=False, default=0)
    sold_stock_value = Column(Integer, nullable=False, default=0)
    visibility = Column(String(3), nullable=False, default="on")

    __table_args__ = (
        CheckConstraint("in_stock_value >= 0", name="ck_product_in_stock"),
        CheckConstraint("sold_stock_value >= 0", name="ck_product_sold_stock"),
    )
