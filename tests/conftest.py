"""Pytest configuration and fixtures."""

import os
import re
import tempfile
from typing import Generator

import pytest

# Set test environment variables before importing app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-storefront-tests"
os.environ["ENABLE_TEST_ROUTES"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="storefront-uploads-")
os.environ.pop("SMTP_HOST", None)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings
from database import Base, get_db
from main import app
from utils.mailer import EmailService, get_email_service

API = "/api/v1"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingEmailService(EmailService):
    """Keeps outgoing messages in memory instead of talking to SMTP."""

    def __init__(self):
        super().__init__(get_settings())
        self.sent = []

    def send(self, to: str, subject: str, html: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True

    def last_token(self) -> str:
        match = re.search(r"token=([0-9a-f]+)", self.sent[-1]["html"])
        assert match, self.sent[-1]["html"]
        return match.group(1)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Fresh schema per test on a shared in-memory SQLite connection."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def outbox() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture
def client(db_session, outbox) -> Generator[TestClient, None, None]:
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: outbox
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _login(client: TestClient, email: str, password: str = "secret123"):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


@pytest.fixture
def login(client):
    """Log in through the API; the client keeps the session cookies."""
    return lambda email, password="secret123": _login(client, email, password)


@pytest.fixture
def make_user(client):
    """Register (and by default verify) an account; returns the token identity."""

    def _make(name="Jane Doe", email="jane@example.com", password="secret123", verify=True, log_in=False):
        resp = client.post(
            f"{API}/auth/test-register",
            json={"name": name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        if verify:
            verified = client.get(
                f"{API}/auth/verify-email",
                params={"verificationToken": body["verification_token"], "email": email},
            )
            assert verified.status_code == 200, verified.text
        if log_in:
            logged_in = _login(client, email, password)
            assert logged_in.status_code == 200, logged_in.text
        return body["user"]

    return _make


@pytest.fixture
def admin(make_user):
    """First account, therefore admin; left logged in."""
    return make_user(name="Admin User", email="admin@example.com", log_in=True)


@pytest.fixture
def product_payload():
    return {
        "name": "accent chair",
        "price": 25999,
        "description": "Cloud bread VHS hell of banjo bicycle rights jianbing umami.",
        "category": "office",
        "company": "marcos",
        "colors": ["#ff0000", "#00ff00"],
    }


@pytest.fixture
def product(client, admin, product_payload):
    resp = client.post(f"{API}/products", json=product_payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["product"]
