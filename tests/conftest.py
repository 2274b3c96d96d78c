# tests/conftest.py

import os

# Settings are read at import time, so the environment is prepared first.
os.environ.setdefault("DATABASE_URL_LOCAL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("KAFKA_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("RETRY_BACKOFF_MIN_SECONDS", "0")
os.environ.setdefault("RETRY_BACKOFF_MAX_SECONDS", "0")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from event_registration.main import app
from event_registration.api import deps
from event_registration.db.base_class import Base
from event_registration.utils import kafka_helpers
import event_registration.models  # noqa: F401  registers every table on Base


# --- Test Database Setup ---
# One in-memory database shared by every connection of the pool.
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="function")
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture(scope="function")
def published(monkeypatch):
    """Captures notifications instead of sending them to Kafka."""
    messages = []

    def fake_publish(notification):
        messages.append(notification.to_message())
        return True

    monkeypatch.setattr(kafka_helpers, "publish_registration_event", fake_publish)
    return messages


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def client(db, published):
    """
    TestClient bound to the test database. Authentication goes through real
    JWT decoding, so tests send headers built by tests.utils.auth.
    """

    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
