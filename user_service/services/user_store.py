"""Persistence operations for users."""
from typing import Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


class UserStore:
    """User queries and writes bound to one database session.

    Database errors are not caught here; they reach the caller unchanged.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_page(
        self,
        active_only: bool = False,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[User]:
        """Users ordered by first name, one page at a time."""
        stmt = select(User)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        stmt = stmt.order_by(User.first_name.asc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, user_id: int) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_email(
        self,
        email: str,
        exclude_id: Optional[int] = None
    ) -> Optional[User]:
        """Find a user by email, ignoring case and optionally one user ID."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def insert(self, user: User) -> User:
        """Persist a new user and return it with its assigned ID."""
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def insert_many(self, users: Iterable[User]) -> List[User]:
        """Persist several users in one transaction."""
        users = list(users)
        self.session.add_all(users)
        await self.session.commit()
        return users

    async def update(self, user: User) -> None:
        """Overwrite the mutable fields of ``user`` by primary key.

        Matching no row is not an error.
        """
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                role=user.role,
                is_active=user.is_active,
            )
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def any_exists(self) -> bool:
        result = await self.session.execute(select(User.id).limit(1))
        return result.first() is not None

    async def count(self, active_only: bool = False) -> int:
        stmt = select(func.count(User.id))
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        return await self.session.scalar(stmt) or 0
