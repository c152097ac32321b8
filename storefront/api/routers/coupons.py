from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_notification_service
from storefront.data.database import get_db
from storefront.domain.schemas import (
    CouponCodeIn,
    CouponDeleteOut,
    CouponEnvelope,
    CouponIn,
    CouponListEnvelope,
    CouponVerifyOut,
)
from storefront.services.coupon_service import CouponService
from storefront.services.notification_service import NotificationService

router = APIRouter(prefix="/coupons", tags=["coupons"])


def get_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> CouponService:
    return CouponService(db, notification_service=notification_service)


@router.get("/", response_model=CouponListEnvelope)
def list_coupons(svc: CouponService = Depends(get_service)):
    return {"success": True, "message": "Coupons", "coupons": svc.list_coupons()}


@router.post("/", response_model=CouponEnvelope, status_code=201)
def save_coupon(payload: CouponIn, svc: CouponService = Depends(get_service)):
    result = svc.save_coupon(payload.code, payload.discount_percentage)
    return {"success": True, "message": "Coupon saved successfully", **result}


@router.post("/verify", response_model=CouponVerifyOut)
def verify_coupon(payload: CouponCodeIn, svc: CouponService = Depends(get_service)):
    discount = svc.verify_coupon(payload.code)
    return {"success": True, "message": "Valid coupon", "discount_percentage": discount}


@router.delete("/", response_model=CouponDeleteOut)
def delete_coupon(payload: CouponIn, svc: CouponService = Depends(get_service)):
    queued = svc.delete_coupon(payload.code, payload.discount_percentage)
    return {"success": True, "message": "Coupon deleted successfully", "broadcast_queued": queued}
