# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service
from storefront.data.database import get_db
from storefront.domain.schemas import (
    AddToCartIn,
    CartEnvelope,
    Envelope,
    GetCartIn,
    RemoveItemEnvelope,
    RemoveItemIn,
    UpdateQuantityIn,
)
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


@router.post("/addtocart", response_model=CartEnvelope)
def add_to_cart(payload: AddToCartIn, svc: CartService = Depends(get_service)):
    cart = svc.merge(payload.user_id, payload.items, cart_id=payload.cart_id)
    return {"success": True, "message": "Cart updated successfully", "cart": cart}


@router.post("/get-cart", response_model=CartEnvelope)
def get_cart(payload: GetCartIn, svc: CartService = Depends(get_service)):
    cart = svc.get_cart(user_id=payload.user_id, cart_id=payload.cart_id)
    return {"success": True, "message": "Cart found successfully", "cart": cart}


@router.put("/update-quantity", response_model=CartEnvelope)
def update_quantity(payload: UpdateQuantityIn, svc: CartService = Depends(get_service)):
    cart = svc.update_quantity(payload.user_id, payload.product_id, payload.quantity)
    return {"success": True, "message": "Quantity updated successfully.", "cart": cart}


@router.post("/remove-item", response_model=RemoveItemEnvelope)
def remove_item(payload: RemoveItemIn, svc: CartService = Depends(get_service)):
    removed = svc.remove(payload.user_id, payload.product_id)
    message = "Item deleted successfully." if removed else "Item was not in the cart."
    return {"success": True, "message": message, "removed": removed}


@router.delete("/delete-cart/{user_id}", response_model=Envelope)
def delete_cart(user_id: str, svc: CartService = Depends(get_service)):
    svc.delete(user_id)
    return {"success": True, "message": "Cart deleted successfully."}
