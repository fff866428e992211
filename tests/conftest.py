"""
Pytest configuration and fixtures for the conversation service tests.

Every test gets its own in-memory SQLite database, so services are free to
commit without leaking state between tests.
"""

import os

# Settings are read once at import time; point them at test values first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("INTERNAL_SECRET", "test-internal-secret")

from typing import Callable, Dict, Generator

import jwt
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.database import Base
from app.models import Conversation
from app.services.activity_service import ActivityService
from app.services.conversation_service import ConversationService
from app.services.message_service import MessageService
from app.services.moderation_service import ModerationService


@pytest.fixture
def test_engine():
    """Create a fresh in-memory SQLite engine with all tables."""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},  # TestClient runs the app in another thread
        poolclass=StaticPool,
    )
    import app.models  # noqa: F401

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a database session bound to the per-test engine."""
    session = sessionmaker(bind=test_engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def conversation_service(db_session: Session) -> ConversationService:
    return ConversationService(db_session)


@pytest.fixture
def message_service(db_session: Session) -> MessageService:
    return MessageService(db_session)


@pytest.fixture
def activity_service(db_session: Session) -> ActivityService:
    return ActivityService(db_session)


@pytest.fixture
def moderation_service(db_session: Session) -> ModerationService:
    return ModerationService(db_session)


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Build signed access tokens the way the identity provider does."""

    def _make_token(user_id: str, claim: str = "userId", **extra) -> str:
        payload = {claim: user_id, **extra}
        return jwt.encode(payload, get_settings().JWT_SECRET, algorithm="HS256")

    return _make_token


@pytest.fixture
def auth_headers(make_token) -> Callable[[str], Dict[str, str]]:
    def _auth_headers(user_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _auth_headers


@pytest.fixture
def internal_headers() -> Dict[str, str]:
    return {"X-Internal-Secret": get_settings().INTERNAL_SECRET}


@pytest.fixture
def api_client(db_session: Session):
    """Create a test client for FastAPI with database dependency override."""
    from fastapi.testclient import TestClient

    from app.database import get_db
    from app.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def item_conversation(conversation_service: ConversationService) -> Conversation:
    """u1 and u2 talking about item 42."""
    conversation, _ = conversation_service.resolve_or_create(
        creator_id="u1",
        participant_ids=["u2"],
        context_type="item",
        context_id="42",
        title="Vintage lamp",
        display_names={"u1": "Alice", "u2": "Bob"},
    )
    return conversation
