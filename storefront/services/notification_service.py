# storefront/services/notification_service.py
from concurrent.futures import ThreadPoolExecutor
from html import escape
from typing import Any, Dict

from kombu.exceptions import OperationalError
from sqlalchemy.orm import sessionmaker

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.user_repo import UserRepo
from storefront.services.mail_client import MailClient
from storefront.utils.settings import BROADCAST_CONCURRENCY, STORE_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def render_order_confirmation(name: str, order: Dict[str, Any]) -> str:
    e = {k: escape(str(v if v is not None else "")) for k, v in order.items()}
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="text-align: center;">{escape(STORE_NAME)}</h1>
  <h2 style="text-align: center;">Order Confirmation</h2>
  <p>Dear {escape(name)},</p>
  <p>Thank you for your order! Your order has been successfully placed.</p>
  <div style="background-color: #f9f9f9; padding: 15px; margin: 20px 0;">
    <p><strong>Order ID:</strong> {e.get("order_id", "")}</p>
    <p><strong>Tracking ID:</strong> {e.get("tracking_id", "")}</p>
    <p><strong>Date:</strong> {e.get("date", "")}</p>
    <p><strong>Time:</strong> {e.get("time", "")}</p>
    <p><strong>Delivery Address:</strong> {e.get("address", "")}</p>
  </div>
  <p style="text-align: right;"><strong>Total Amount:</strong> {e.get("price", "")}</p>
  <p>You can track your order using the tracking ID provided above.</p>
  <p>Best regards,<br>The {escape(STORE_NAME)} Team</p>
</div>
"""


class NotificationService:
    """
    Outgoing mail for the storefront.

    Transactional mail (order confirmation) is sent inline and never fails
    the caller. Broadcasts go through celery so the request that triggered
    them (saving a coupon) does not wait for every recipient.
    """

    def __init__(
        self,
        mail_client: MailClient | None = None,
        session_factory: sessionmaker | None = None,
        max_workers: int = BROADCAST_CONCURRENCY,
    ):
        self.mail_client = mail_client or MailClient()
        self.session_factory = session_factory or SessionLocal
        self.max_workers = max_workers

    def send_order_confirmation(self, email: str, order: Dict[str, Any]) -> bool:
        try:
            self.mail_client.send(
                to=email,
                subject=f"Order Confirmation - Order #{order['order_id']}",
                html=render_order_confirmation(order.get("name", ""), order),
            )
        except Exception as e:
            logger.error(f"[NOTIFICATION] Order {order.get('order_id')} confirmation to {email} failed: {e}")
            return False

        logger.info(f"[NOTIFICATION] Order {order['order_id']} confirmation sent to {email}")
        return True

    def send_otp(self, email: str, otp: str) -> None:
        self.mail_client.send(
            to=email,
            subject="Verification OTP",
            html=(
                f"<h2>{escape(STORE_NAME)} Seller Verification</h2>"
                f"<p>Your verification OTP is: <strong>{otp}</strong></p>"
            ),
        )

    def broadcast(self, subject: str, message: str) -> Dict[str, int]:
        db = self.session_factory()
        try:
            emails = UserRepo(db).list_emails()
        finally:
            db.close()

        logger.info(f"[BROADCAST] '{subject}' to {len(emails)} users")

        def send_one(email: str) -> bool:
            try:
                self.mail_client.send(to=email, subject=subject, text=message)
                return True
            except Exception as e:
                # one bad address must not sink the rest
                logger.warning(f"[BROADCAST] delivery to {email!r} failed: {e}")
                return False

        with ThreadPoolExecutor(max_workers=max(1, self.max_workers)) as pool:
            results = list(pool.map(send_one, emails))

        sent = sum(results)
        summary = {"sent": sent, "failed": len(results) - sent}
        logger.info(f"[BROADCAST] '{subject}' done: {summary}")
        return summary

    def queue_broadcast(self, subject: str, message: str) -> bool:
        try:
            broadcast_task.delay(subject, message)
        except OperationalError as e:
            logger.error(f"[BROADCAST] could not queue '{subject}': {e}")
            return False
        return True


@celery_app.task(name="storefront.services.notification_service.broadcast_task")
def broadcast_task(subject: str, message: str):
    return NotificationService().broadcast(subject, message)
