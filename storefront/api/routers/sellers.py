from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identifier_generator, get_notification_service, get_otp_store
from storefront.data.database import get_db
from storefront.domain.schemas import Envelope, SellerSignupIn, SellerSignupOut, SendOtpIn, VerifyOtpIn
from storefront.services.identifier_service import IdentifierGenerator
from storefront.services.notification_service import NotificationService
from storefront.services.otp_service import OtpStore
from storefront.services.seller_service import SellerService

router = APIRouter(prefix="/sellers", tags=["sellers"])


def get_service(
    db: Session = Depends(get_db),
    generator: IdentifierGenerator = Depends(get_identifier_generator),
    otp_store: OtpStore = Depends(get_otp_store),
    notification_service: NotificationService = Depends(get_notification_service),
) -> SellerService:
    return SellerService(db, generator=generator, otp_store=otp_store, notification_service=notification_service)


@router.post("/signup", response_model=SellerSignupOut, status_code=201)
def signup(payload: SellerSignupIn, svc: SellerService = Depends(get_service)):
    seller_id = svc.signup(payload.email_id, payload.phone_number, payload.password)
    return {"success": True, "message": "Seller registered successfully", "seller_id": seller_id}


@router.post("/send-otp", response_model=Envelope)
def send_otp(payload: SendOtpIn, svc: SellerService = Depends(get_service)):
    svc.send_otp(payload.email_id)
    return {"success": True, "message": "OTP sent successfully"}


@router.post("/verify-otp", response_model=Envelope)
def verify_otp(payload: VerifyOtpIn, svc: SellerService = Depends(get_service)):
    svc.verify_otp(payload.email_id, payload.otp)
    return {"success": True, "message": "OTP verified successfully"}
