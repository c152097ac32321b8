# storefront/services/product_service.py
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.code_spaces import PRODUCT_ID
from storefront.domain.errors import NotFoundError, PersistenceError, ValidationError
from storefront.repos.product_repo import ProductRepo
from storefront.services.identifier_service import IdentifierGenerator
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session, generator: IdentifierGenerator):
        self.repo = ProductRepo(db)
        self.generator = generator

    def assign_product_ids(self) -> List[Dict[str, Any]]:
        """Give every product without a productId a fresh 6-digit one."""
        # ids set before the generator existed must not be drawn again
        self.generator.register_existing(PRODUCT_ID, self.repo.list_assigned_ids())

        missing = self.repo.list_missing_ids()
        logger.info(f"Assigning product ids to {len(missing)} products")

        for product in missing:
            product.product_id = self.generator.allocate(PRODUCT_ID)

        try:
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Product id assignment failed: {e}")
            raise PersistenceError("Error assigning product IDs") from e

        return [self._to_dict(p) for p in missing]

    def update_stock(self, product_id: str, in_stock_value: int, sold_stock_value: int) -> Dict[str, Any]:
        errors = {
            field: "must be a non-negative integer"
            for field, value in (("inStockValue", in_stock_value), ("soldStockValue", sold_stock_value))
            if isinstance(value, bool) or not isinstance(value, int) or value < 0
        }
        if errors:
            raise ValidationError("Invalid stock values", details=errors)

        product = self.repo.get_by_product_id(product_id)
        if not product:
            raise NotFoundError("Product not found", details={"productId": product_id})

        product.in_stock_value = in_stock_value
        product.sold_stock_value = sold_stock_value
        try:
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            raise PersistenceError("Error updating stock status") from e

        logger.info(f"Product {product_id} stock: in={in_stock_value} sold={sold_stock_value}")
        return self._to_dict(product)

    @staticmethod
    def _to_dict(product: ProductModel) -> Dict[str, Any]:
        return {
            "product_id": product.product_id,
            "name": product.name,
            "price": product.price,
            "category": product.category,
            "in_stock_value": product.in_stock_value,
            "sold_stock_value": product.sold_stock_value,
            "visibility": product.visibility,
        }
