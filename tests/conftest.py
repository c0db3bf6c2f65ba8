"""Test configuration and fixtures."""
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from user_service.main import app
from user_service.core.security import PasswordHasher
from user_service.database import create_session_factory
from user_service.models.base import Base
from user_service.models.user import User, utcnow
from user_service.services.user_service import UserService, get_user_service


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """Create async engine on a throwaway SQLite file."""
    # NullPool: the TestClient runs requests on its own event loop
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return create_session_factory(async_engine)


@pytest.fixture
def hasher():
    """Cheap bcrypt cost so the suite stays fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_service(session_factory, hasher):
    return UserService(session_factory, hasher=hasher)


@pytest.fixture
def client(user_service):
    """Create test client with the user service dependency overridden."""
    app.dependency_overrides[get_user_service] = lambda: user_service

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory, hasher):
    """Factory inserting users straight into the database."""

    async def _make(**overrides) -> User:
        values = {
            "email": "test@example.com",
            "first_name": "Test",
            "last_name": "User",
            "password_hash": hasher.hash("testpassword123"),
            "role": "Customer",
            "created_at": utcnow(),
            "is_active": True,
        }
        values.update(overrides)
        user = User(**values)

        async with session_factory() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)

        return user

    return _make


@pytest_asyncio.fixture
async def test_user(make_user):
    """Create test user."""
    return await make_user()


@pytest_asyncio.fixture
async def inactive_user(make_user):
    """Create a logically deleted user."""
    return await make_user(
        email="gone@example.com",
        first_name="Gone",
        last_name="Away",
        is_active=False,
    )
