"""Tests for database initialization and seeding."""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from user_service.database import create_session_factory, migrate_db
from user_service.database.engine import pending_tables
from user_service.services.seed import SEED_USERS, initialize_database, seed_users
from user_service.services.user_store import UserStore


async def all_users(session_factory):
    async with session_factory() as session:
        return await UserStore(session).list_page()


async def test_seed_empty_store(session_factory, hasher):
    inserted = await seed_users(session_factory, hasher)

    users = await all_users(session_factory)
    assert inserted == len(SEED_USERS) == 4
    assert sorted(u.email for u in users) == sorted(s.email for s in SEED_USERS)
    assert {u.role for u in users} == {"Premium", "Customer", "Admin"}
    assert all(u.is_active for u in users)


async def test_seed_passwords_are_hashed(session_factory, hasher):
    await seed_users(session_factory, hasher)

    users = {u.email: u for u in await all_users(session_factory)}
    admin = users["admin@tienda.mx"]
    assert admin.password_hash != "Admin123!"
    assert hasher.verify("Admin123!", admin.password_hash)


async def test_seed_is_idempotent(session_factory, hasher):
    await seed_users(session_factory, hasher)
    again = await seed_users(session_factory, hasher)

    assert again == 0
    assert len(await all_users(session_factory)) == len(SEED_USERS)


async def test_seed_skips_non_empty_store(session_factory, hasher, inactive_user):
    inserted = await seed_users(session_factory, hasher)

    users = await all_users(session_factory)
    assert inserted == 0
    assert [u.id for u in users] == [inactive_user.id]


async def test_initialize_database_creates_schema_and_seeds(tmp_path, hasher):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}",
        poolclass=NullPool,
    )
    session_factory = create_session_factory(engine)

    try:
        first = await initialize_database(engine, session_factory, hasher)
        second = await initialize_database(engine, session_factory, hasher)

        assert first == len(SEED_USERS)
        assert second == 0
        assert len(await all_users(session_factory)) == len(SEED_USERS)
    finally:
        await engine.dispose()


async def test_initialize_database_without_seed(tmp_path, hasher):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'noseed.db'}",
        poolclass=NullPool,
    )
    session_factory = create_session_factory(engine)

    try:
        inserted = await initialize_database(engine, session_factory, hasher, seed=False)

        assert inserted == 0
        assert await all_users(session_factory) == []
    finally:
        await engine.dispose()


async def test_initialize_database_failure_is_raised(tmp_path, hasher):
    # Directory does not exist, so SQLite cannot open the file
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}",
        poolclass=NullPool,
    )

    try:
        with pytest.raises(OperationalError):
            await initialize_database(engine, create_session_factory(engine), hasher)
    finally:
        await engine.dispose()


async def test_migrate_db_creates_missing_tables(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'migrate.db'}",
        poolclass=NullPool,
    )

    try:
        assert await pending_tables(engine) == ["users"]
        assert await migrate_db(engine) == ["users"]
        assert await pending_tables(engine) == []
        assert await migrate_db(engine) == []
    finally:
        await engine.dispose()
