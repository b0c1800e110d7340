"""
Test configuration and fixtures
"""
import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the environment must be set first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_RETRY_DELAY_SECONDS"] = "0"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["DAILY_CREDIT_LIMIT"] = "10"
os.environ.pop("EDIT_GENERATOR_URL", None)
os.environ.pop("PEXELS_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.schemas.edits import EditProposal
from app.services.edit_generator import get_edit_generator

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakeClock:
    """Controllable clock for quota and timestamp tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeEditGenerator:
    """Edit generator returning queued proposals (or raising a queued error)."""

    def __init__(self):
        self.proposals = []
        self.error = None
        self.calls = []

    async def propose_edit(self, messages, files):
        self.calls.append({"messages": list(messages), "files": files})
        if self.error is not None:
            raise self.error
        if self.proposals:
            return self.proposals.pop(0)
        return EditProposal(responseType="CHAT", message="Happy to help!")


@pytest.fixture
def db_session():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 14, 15, 30, tzinfo=timezone.utc))


@pytest.fixture
def edit_generator() -> FakeEditGenerator:
    return FakeEditGenerator()


@pytest.fixture
def client(db_session, edit_generator):
    """Create test client with database and edit generator overrides"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_edit_generator] = lambda: edit_generator

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def user_headers() -> dict:
    return {"X-User-Email": "u1@example.com"}


@pytest.fixture
def other_headers() -> dict:
    return {"X-User-Email": "u2@example.com"}
