# storefront/services/mail_client.py
import smtplib
from email.message import EmailMessage

from storefront.domain.errors import ExternalServiceError
from storefront.utils.retry import smtp_retry
from storefront.utils.settings import (
    EXTERNAL_TIMEOUT_SECONDS,
    MAIL_FROM,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USER,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class MailClient:
    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        user: str = SMTP_USER,
        password: str = SMTP_PASSWORD,
        use_tls: bool = SMTP_USE_TLS,
        sender: str = MAIL_FROM,
        timeout: float = EXTERNAL_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str | None = None, text: str | None = None) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject

        if html is not None:
            msg.set_content(text or "This message requires an HTML capable mail client.")
            msg.add_alternative(html, subtype="html")
        else:
            msg.set_content(text or "")

        logger.info(f"MailClient SMTP {self.host}:{self.port} -> {to} ({subject})")
        try:
            self._deliver(msg)
        except OSError as e:
            raise ExternalServiceError(f"Mail delivery to {to} failed", details={"reason": str(e)}) from e

    @smtp_retry()
    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)
