from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time; configure before the app is imported
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_32_chars_minimum")
os.environ.setdefault("SESSION_SECRET", "test_session_secret")
os.environ.setdefault("ENV", "local")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("NOTIFICATION_DISPATCH", "background")
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("GOOGLE_CLIENT_ID", None)
os.environ.pop("GOOGLE_CLIENT_SECRET", None)

from app.db import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base  # noqa: E402
from app.notifications import Notifier, get_notifier  # noqa: E402


class RecordingNotifier(Notifier):
    """Captures every notification; ``fail`` names steps that should raise."""

    def __init__(self, fail: set[str] | None = None):
        self.fail = fail or set()
        self.calls: list[tuple[str, str]] = []

    def _record(self, kind: str, email: str) -> None:
        self.calls.append((kind, email))
        if kind in self.fail:
            raise RuntimeError(f"{kind} provider down")

    def upsert_contact(self, contact):
        self._record("contact", contact.email)

    def send_registration_confirmation(self, notice):
        self._record("confirmation", notice.contact.email)

    def send_operator_notification(self, contact, notice=None):
        self._record("operator", contact.email)

    def send_welcome(self, contact):
        self._record("welcome", contact.email)

    def send_cancellation(self, notice):
        self._record("cancellation", notice.contact.email)

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.calls]


@pytest.fixture(autouse=True)
def clean_db():
    # fresh schema per test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def notifier() -> RecordingNotifier:
    recording = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recording
    return recording


@pytest.fixture
def client(notifier) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
