from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identifier_generator
from storefront.data.database import get_db
from storefront.domain.schemas import Envelope, ProductListEnvelope, StockUpdateIn
from storefront.services.identifier_service import IdentifierGenerator
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


def get_service(
    db: Session = Depends(get_db),
    generator: IdentifierGenerator = Depends(get_identifier_generator),
) -> ProductService:
    return ProductService(db, generator=generator)


@router.post("/assign-productid", response_model=ProductListEnvelope)
def assign_product_ids(svc: ProductService = Depends(get_service)):
    products = svc.assign_product_ids()
    return {
        "success": True,
        "message": f"Product IDs assigned to {len(products)} products",
        "products": products,
    }


@router.post("/instock-update", response_model=Envelope)
def update_stock(payload: StockUpdateIn, svc: ProductService = Depends(get_service)):
    svc.update_stock(payload.product_id, payload.in_stock_value, payload.sold_stock_value)
    return {"success": True, "message": "Stock status updated successfully"}
