"""
Pytest configuration and fixtures for testing.
"""
import os
import tempfile

# Test database URL - use environment variable if available, a throw-away SQLite file otherwise
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"eventhub_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{TEST_DB_PATH}")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable, Awaitable
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.main import app
from eventhub.db.session import Base, engine, AsyncSessionLocal
from eventhub.core.security import hash_password, create_access_token
from eventhub.db.models import User, Event, Participant
from eventhub.db.repositories import next_revision


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create fresh tables and a session for each test.
    Tables are dropped again afterwards for complete isolation.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client bound to the app.
    Each request opens its own session, as in production.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory creating users whose password is always Test123!@#."""
    async def _make_user(email: str, name: str) -> User:
        user = User(
            email=email,
            hashed_password=hash_password("Test123!@#"),
            name=name,
            created_at=datetime.now(timezone.utc),
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make_user


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    return await make_user("testuser@example.com", "Test User")


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    return await make_user("other@example.com", "Other User")


@pytest_asyncio.fixture
async def test_organizer(make_user) -> User:
    return await make_user("organizer@example.com", "Test Organizer")


def auth_headers(user: User) -> dict:
    """Authorization header carrying a valid access token for ``user``."""
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    return auth_headers


@pytest.fixture
def user_headers(test_user: User) -> dict:
    return auth_headers(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return auth_headers(other_user)


@pytest.fixture
def organizer_headers(test_organizer: User) -> dict:
    return auth_headers(test_organizer)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_organizer: User) -> Event:
    """Create a test event with room for 50."""
    now = datetime.now(timezone.utc)
    event = Event(
        rev=next_revision(),
        title="Test Event",
        description="A test event description",
        location="Test Location",
        date=now + timedelta(days=7),
        max_participants=50,
        creator_id=test_organizer.id,
        creator_name=test_organizer.name,
        created_at=now,
        updated_at=now,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_rsvp(db_session: AsyncSession, test_user: User, test_event: Event) -> Participant:
    """Create an RSVP of test_user to test_event."""
    rsvp = Participant(
        rev=next_revision(),
        event_id=test_event.id,
        user_id=test_user.id,
        user_name=test_user.name,
        user_email=test_user.email,
        event_title=test_event.title,
        event_date=test_event.date,
        rsvp_date=datetime.now(timezone.utc),
    )
    db_session.add(rsvp)
    await db_session.commit()
    await db_session.refresh(rsvp)
    return rsvp


@pytest.fixture(autouse=True)
def mock_password_hashing(monkeypatch):
    """
    Mock bcrypt password hashing so tests do not depend on the bcrypt backend.
    """
    class MockPasswordContext:
        def hash(self, password: str) -> str:
            return f"$2b$12$mockedhash{password}"

        def verify(self, plain: str, hashed: str) -> bool:
            return hashed == f"$2b$12$mockedhash{plain}"

    from eventhub.core import security
    monkeypatch.setattr(security, "pwd_context", MockPasswordContext())
