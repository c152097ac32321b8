# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

USERS = [
    {"user_id": "u1", "name": "Demo Shopper", "email": "shopper@storefront.local"},
]

# product ids left empty on purpose, POST /products/assign-productid fills them
PRODUCTS = [
    {"name": "Keyboard", "price": Decimal("199.99"), "category": "accessories", "in_stock_value": 25},
    {"name": "Mouse", "price": Decimal("49.50"), "category": "accessories", "in_stock_value": 40},
    {"name": "Monitor", "price": Decimal("899.00"), "category": "displays", "in_stock_value": 8},
]


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            logger.info("Database already seeded")
            return
        db.add_all(UserModel(**u) for u in USERS)
        db.add_all(ProductModel(**p) for p in PRODUCTS)
        db.commit()
        logger.info(f"Seeded {len(USERS)} users and {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    init_db()
    seed()
