# storefront/services/seller_service.py
import hashlib
import secrets

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.seller import SellerModel
from storefront.domain.code_spaces import SELLER_ID
from storefront.domain.errors import ConflictError, NotFoundError, ValidationError
from storefront.repos.seller_repo import SellerRepo
from storefront.services.identifier_service import IdentifierGenerator
from storefront.services.notification_service import NotificationService
from storefront.services.otp_service import OtpStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PBKDF2_ITERATIONS = 260_000


def hash_password(password: str, salt: str | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


class SellerService:
    def __init__(
        self,
        db: Session,
        generator: IdentifierGenerator,
        otp_store: OtpStore,
        notification_service: NotificationService,
    ):
        self.repo = SellerRepo(db)
        self.generator = generator
        self.otp_store = otp_store
        self.notification_service = notification_service

    def signup(self, email: str, phone_number: str, password: str) -> str:
        email = email.strip().lower()
        if self.repo.get_by_email(email):
            raise ConflictError("Seller already exists", details={"emailId": email})

        seller_id = self.generator.allocate(SELLER_ID)
        seller = SellerModel(
            seller_id=seller_id,
            email=email,
            phone_number=phone_number,
            password_hash=hash_password(password),
        )
        try:
            self.repo.add(seller)
        except IntegrityError as e:
            self.repo.rollback()
            raise ConflictError("Seller already exists", details={"emailId": email}) from e

        logger.info(f"Seller {seller_id} registered for {email}")
        return seller_id

    def send_otp(self, email: str) -> None:
        email = email.strip().lower()
        if not self.repo.get_by_email(email):
            raise NotFoundError("Seller not found", details={"emailId": email})

        otp = self.otp_store.issue(email)
        self.notification_service.send_otp(email, otp)

    def verify_otp(self, email: str | None, otp: str | None) -> None:
        missing = {}
        if not otp:
            missing["otp"] = "OTP is required"
        if not email:
            missing["emailId"] = "Email ID is required"
        if missing:
            raise ValidationError("Missing required fields", details=missing)

        email = email.strip().lower()
        seller = self.repo.get_by_email(email)
        if not seller:
            raise NotFoundError("Seller not found", details={"emailId": email})

        if not self.otp_store.consume(email, otp):
            if self.otp_store.has_pending(email):
                raise ValidationError("Invalid OTP", details={"otp": "The provided OTP does not match"})
            raise ValidationError("No OTP found", details={"otp": "OTP was not generated or has expired"})

        seller.email_verified = True
        seller.phone_verified = True
        self.repo.commit()
        logger.info(f"Seller {seller.seller_id} verified")
