# storefront/services/coupon_service.py
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel
from storefront.domain.errors import ConflictError, NotFoundError
from storefront.repos.coupon_repo import CouponRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CouponService:
    def __init__(self, db: Session, notification_service: NotificationService):
        self.repo = CouponRepo(db)
        self.notification_service = notification_service

    def list_coupons(self) -> List[Dict[str, Any]]:
        return [self._to_dict(c) for c in self.repo.list_all()]

    def save_coupon(self, code: str, discount_percentage: int) -> Dict[str, Any]:
        """Returns the coupon and whether the announcement got queued."""
        try:
            coupon = self.repo.add(CouponModel(code=code, discount_percentage=discount_percentage))
        except IntegrityError as e:
            self.repo.rollback()
            raise ConflictError("Coupon code already exists", details={"code": code}) from e

        logger.info(f"Coupon {code} saved ({discount_percentage}%)")

        queued = self.notification_service.queue_broadcast(
            "New Coupon Available!",
            f"A new coupon {code} is now available with {discount_percentage}% discount. "
            f"Use it in your next purchase!",
        )
        return {"coupon": self._to_dict(coupon), "broadcast_queued": queued}

    def verify_coupon(self, code: str) -> int:
        coupon = self.repo.get_by_code(code)
        if not coupon:
            raise NotFoundError("Invalid coupon code", details={"code": code})
        return coupon.discount_percentage

    def delete_coupon(self, code: str, discount_percentage: int) -> bool:
        coupon = self.repo.get_by_code(code)
        if not coupon or coupon.discount_percentage != discount_percentage:
            raise NotFoundError("Coupon not found", details={"code": code})

        self.repo.delete(coupon)
        logger.info(f"Coupon {code} deleted")

        return self.notification_service.queue_broadcast(
            "Coupon Expired",
            f"The coupon {code} with {discount_percentage}% discount has expired.",
        )

    @staticmethod
    def _to_dict(coupon: CouponModel) -> Dict[str, Any]:
        return {"code": coupon.code, "discount_percentage": coupon.discount_percentage}
