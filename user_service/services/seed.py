"""Database initialization and example accounts."""
import logging
from typing import List, NamedTuple, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..core.logging import UserEventLogger
from ..core.security import PasswordHasher, password_hasher
from ..database import init_db, migrate_db
from ..models.user import User, utcnow
from .user_store import UserStore

logger = logging.getLogger(__name__)
events = UserEventLogger()


class SeedUser(NamedTuple):
    email: str
    first_name: str
    last_name: str
    role: str
    password: str


SEED_USERS: List[SeedUser] = [
    SeedUser("juan.perez@empresa.es", "Juan", "Pérez", "Premium", "Password123!"),
    SeedUser("marie.dubois@societe.fr", "Marie", "Dubois", "Customer", "Password123!"),
    SeedUser("john.doe@company.com", "John", "Doe", "Premium", "Password123!"),
    SeedUser("admin@tienda.mx", "Admin", "System", "Admin", "Admin123!"),
]


def build_seed_users(hasher: PasswordHasher) -> List[User]:
    now = utcnow()
    return [
        User(
            email=seed.email,
            first_name=seed.first_name,
            last_name=seed.last_name,
            password_hash=hasher.hash(seed.password),
            role=seed.role,
            created_at=now,
            is_active=True,
        )
        for seed in SEED_USERS
    ]


async def seed_users(
    session_factory: async_sessionmaker[AsyncSession],
    hasher: Optional[PasswordHasher] = None
) -> int:
    """Insert the example accounts when the users table is empty.

    Returns the number of inserted users, 0 when the table already had rows.
    """
    hasher = hasher or password_hasher

    async with session_factory() as session:
        store = UserStore(session)
        if await store.any_exists():
            events.log_seed_skipped(await store.count())
            return 0

        users = await store.insert_many(build_seed_users(hasher))

    events.log_seed_completed(len(users))
    return len(users)


async def initialize_database(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    hasher: Optional[PasswordHasher] = None,
    seed: bool = True
) -> int:
    """Ensure the schema, apply pending changes and seed an empty store.

    Safe to run on every startup. Errors are logged and re-raised so the
    application does not start on a broken database.
    """
    try:
        logger.info("Verifying database schema")
        await init_db(engine)

        await migrate_db(engine)

        if not seed:
            return 0
        return await seed_users(session_factory, hasher)

    except Exception:
        logger.exception("Database initialization failed")
        raise
