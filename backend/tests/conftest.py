"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["PUBSUB_URL"] = ""
os.environ.pop("SENTRY_DSN", None)

from repositories.database import Base  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture
def create_user(db_session):
    """Factory creating activated users (with their personal conversation)."""
    from models.schemas import UserCreate
    from services.user_service import UserService

    def _create(login: str, activate: bool = True) -> db_models.User:
        user = UserService.create_user(
            db_session, UserCreate(login=login, email=f"{login}@example.com")
        )
        if activate:
            user = UserService.activate_user(db_session, user.id)
        return user

    return _create


@pytest.fixture
def create_conversation(db_session):
    """Factory creating conversations owned by a given user."""
    from models.schemas import ConversationCreate
    from services.conversation_service import ConversationService

    def _create(
        owner: db_models.User, name: str = "General", private: bool = False
    ) -> db_models.Conversation:
        return ConversationService.create_conversation(
            db_session, owner.id, ConversationCreate(name=name, private=private)
        )

    return _create


@pytest.fixture
def create_message(db_session):
    """Factory inserting messages directly, with an optional timestamp."""

    def _create(
        author: db_models.User,
        conversation: db_models.Conversation,
        body: str = "hello",
        created_at: datetime | None = None,
        **attachment,
    ) -> db_models.Message:
        message = db_models.Message(
            user_id=author.id,
            conversation_id=conversation.id,
            message=body,
            created_at=created_at or datetime.now(timezone.utc),
            **attachment,
        )
        db_session.add(message)
        db_session.commit()
        db_session.refresh(message)
        return message

    return _create


@pytest.fixture
def alice(create_user) -> db_models.User:
    """Activated user owning conversations in most tests."""
    return create_user("alice")


@pytest.fixture
def bob(create_user) -> db_models.User:
    """Second activated user."""
    return create_user("bob")


@pytest.fixture
def public_conversation(alice, create_conversation) -> db_models.Conversation:
    """Public conversation owned by alice."""
    return create_conversation(alice, name="Open floor")


@pytest.fixture
def private_conversation(alice, create_conversation) -> db_models.Conversation:
    """Private conversation owned by alice."""
    return create_conversation(alice, name="Back room", private=True)


@pytest.fixture
def message(alice, public_conversation, create_message) -> db_models.Message:
    """Message posted by alice in her public conversation."""
    return create_message(alice, public_conversation, body="first!")


@pytest.fixture
def invite_for_bob(db_session, alice, bob, private_conversation) -> db_models.Invite:
    """Pending invite of bob to alice's private conversation."""
    invite = db_models.Invite(
        user_id=bob.id,
        requestor_id=alice.id,
        conversation_id=private_conversation.id,
        token="abc123",
    )
    db_session.add(invite)
    db_session.commit()
    db_session.refresh(invite)
    return invite
