import os
import tempfile
import threading

# settings are read at import time, so the environment goes first
_DB_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'storefront.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ["PAYMENT_KEY_ID"] = "rzp_test_key"
os.environ["PAYMENT_KEY_SECRET"] = "test-secret"
os.environ["BROADCAST_CONCURRENCY"] = "4"

from unittest.mock import MagicMock, patch  # noqa: E402

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import storefront.data.models  # noqa: E402,F401
from storefront.api import deps  # noqa: E402
from storefront.data.database import Base, SessionLocal, engine  # noqa: E402
from storefront.data.models.user import UserModel  # noqa: E402
from storefront.domain.errors import ExternalServiceError  # noqa: E402
from storefront.main import create_app  # noqa: E402
from storefront.services.identifier_service import IdentifierGenerator  # noqa: E402
from storefront.services.lock_service import LockService  # noqa: E402
from storefront.services.notification_service import NotificationService  # noqa: E402
from storefront.services.otp_service import OtpStore  # noqa: E402


class RecordingMailClient:
    """Stands in for SMTP. Keeps every message, can be told to fail."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self.fail_all = False
        self._lock = threading.Lock()

    def send(self, to, subject, html=None, text=None):
        if self.fail_all or to in self.fail_for:
            raise ExternalServiceError(f"Mail delivery to {to} failed")
        with self._lock:
            self.sent.append({"to": to, "subject": subject, "html": html, "text": text})

    def to(self, address):
        return [m for m in self.sent if m["to"] == address]


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def lock_service(redis_client):
    return LockService(client=redis_client)


@pytest.fixture()
def otp_store(redis_client):
    return OtpStore(client=redis_client)


@pytest.fixture()
def mail():
    return RecordingMailClient()


@pytest.fixture()
def notifications(mail):
    return NotificationService(mail_client=mail, session_factory=SessionLocal)


@pytest.fixture()
def generator():
    return IdentifierGenerator(session_factory=SessionLocal)


@pytest.fixture()
def make_user(db):
    def _make(user_id="u1", name="Asha Rao", email=None):
        user = UserModel(user_id=user_id, name=name, email=email or f"{user_id}@example.com")
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def queued():
    """Replaces the celery task so nothing reaches a broker."""
    with patch("storefront.services.notification_service.broadcast_task") as task:
        task.delay = MagicMock()
        yield task.delay


@pytest.fixture()
def client(redis_client, mail, queued):
    app = create_app()
    app.dependency_overrides[deps.get_redis] = lambda: redis_client
    app.dependency_overrides[deps.get_mail_client] = lambda: mail
    return TestClient(app)
