"""User RPC request handlers.

Every handler runs the same steps: validate the request, check business
rules against the store, read or write through the store and map the entity
to its wire shape. Expected failures come back as a tagged ``Result``;
anything unexpected is logged here and reported as ``INTERNAL`` without
exposing the cause.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import settings
from ..core.exceptions import INTERNAL_ERROR_MESSAGE, StatusCode
from ..core.logging import UserEventLogger
from ..core.results import FieldViolation, Result
from ..core.security import PasswordHasher, password_hasher
from ..core.validation import (
    join_violations,
    validate_create_user,
    validate_delete_user,
    validate_get_user,
    validate_list_users,
    validate_update_user,
)
from ..database import get_session_factory
from ..models.user import User, utcnow
from ..schemas.user import (
    CreateUserRequest,
    DeleteUserRequest,
    DeleteUserResponse,
    GetUserRequest,
    ListUsersRequest,
    UpdateUserRequest,
    UserRecord,
)
from .user_store import UserStore

logger = structlog.get_logger(__name__)
events = UserEventLogger()

CancelCheck = Callable[[], Awaitable[bool]]


class UserService:
    """Handlers for the five user operations."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: Optional[PasswordHasher] = None,
        default_role: Optional[str] = None
    ):
        self.session_factory = session_factory
        self.hasher = hasher or password_hasher
        self.default_role = default_role or settings.users.default_role

    @asynccontextmanager
    async def _store(self) -> AsyncIterator[UserStore]:
        """Open a session for one call; it is closed on every exit path."""
        async with self.session_factory() as session:
            yield UserStore(session)

    def _invalid(self, operation: str, violations: List[FieldViolation]) -> Result:
        events.log_validation_failed(operation, [v.message for v in violations])
        return Result.fail(
            StatusCode.INVALID_ARGUMENT,
            join_violations(violations),
            violations
        )

    def _not_found(self, operation: str, user_id: int) -> Result:
        logger.warning("User not found", operation=operation, user_id=user_id)
        return Result.fail(
            StatusCode.NOT_FOUND,
            f"User with ID {user_id} does not exist"
        )

    def _email_taken(self, operation: str, email: str, message: str) -> Result:
        logger.warning("Email already in use", operation=operation, email=email)
        return Result.fail(StatusCode.ALREADY_EXISTS, message)

    def _internal(self, operation: str, **context) -> Result:
        logger.exception(f"{operation} failed", operation=operation, **context)
        return Result.fail(StatusCode.INTERNAL, INTERNAL_ERROR_MESSAGE)

    async def list_users(
        self,
        request: ListUsersRequest,
        is_cancelled: Optional[CancelCheck] = None
    ) -> Result[AsyncIterator[UserRecord]]:
        """Load one page of users and return it as a record stream.

        The page is read inside the session scope. The returned stream then
        maps users one at a time and stops quietly once ``is_cancelled``
        reports that the caller went away.
        """
        operation = "ListUsers"
        try:
            events.log_call(
                operation,
                page_number=request.page_number,
                page_size=request.page_size,
                active_only=request.active_only
            )

            violations = validate_list_users(request)
            if violations:
                return self._invalid(operation, violations)

            async with self._store() as store:
                users = await store.list_page(
                    active_only=request.active_only,
                    offset=request.offset,
                    limit=request.page_size
                )

            events.log_users_listed(
                request.page_number,
                request.page_size,
                request.active_only,
                len(users)
            )
            return Result.success(self._stream(users, is_cancelled))

        except Exception:
            return self._internal(
                operation,
                page_number=request.page_number,
                page_size=request.page_size
            )

    async def _stream(
        self,
        users: List[User],
        is_cancelled: Optional[CancelCheck]
    ) -> AsyncIterator[UserRecord]:
        sent = 0
        for user in users:
            if is_cancelled is not None and await is_cancelled():
                events.log_list_cancelled(sent, len(users))
                return
            yield UserRecord.from_user(user)
            sent += 1

    async def get_user(self, request: GetUserRequest) -> Result[UserRecord]:
        operation = "GetUser"
        try:
            events.log_call(operation, user_id=request.id)

            violations = validate_get_user(request)
            if violations:
                return self._invalid(operation, violations)

            async with self._store() as store:
                user = await store.get_by_id(request.id)

            if user is None:
                return self._not_found(operation, request.id)

            return Result.success(UserRecord.from_user(user))

        except Exception:
            return self._internal(operation, user_id=request.id)

    async def create_user(self, request: CreateUserRequest) -> Result[UserRecord]:
        operation = "CreateUser"
        try:
            events.log_call(operation, email=request.email)

            violations = validate_create_user(request)
            if violations:
                return self._invalid(operation, violations)

            already_exists = f"A user with email '{request.email}' already exists"

            async with self._store() as store:
                if await store.find_by_email(request.email) is not None:
                    return self._email_taken(operation, request.email, already_exists)

                # bcrypt is CPU bound, keep it off the event loop
                password_hash = await asyncio.to_thread(
                    self.hasher.hash, request.password
                )
                user = User(
                    email=request.email,
                    first_name=request.first_name,
                    last_name=request.last_name,
                    password_hash=password_hash,
                    role=request.role if request.role.strip() else self.default_role,
                    created_at=utcnow(),
                    is_active=True,
                )

                try:
                    user = await store.insert(user)
                except IntegrityError:
                    # Lost a race with a concurrent create on the unique index
                    await store.session.rollback()
                    return self._email_taken(operation, request.email, already_exists)

            events.log_user_created(user.id, user.email, user.role)
            return Result.success(UserRecord.from_user(user))

        except Exception:
            return self._internal(operation, email=request.email)

    async def update_user(self, request: UpdateUserRequest) -> Result[UserRecord]:
        """Overwrite email, names, role and active flag. The password is kept."""
        operation = "UpdateUser"
        try:
            events.log_call(operation, user_id=request.id)

            violations = validate_update_user(request)
            if violations:
                return self._invalid(operation, violations)

            already_exists = f"Another user with email '{request.email}' already exists"

            async with self._store() as store:
                user = await store.get_by_id(request.id)
                if user is None:
                    return self._not_found(operation, request.id)

                if user.email != request.email:
                    other = await store.find_by_email(request.email, exclude_id=request.id)
                    if other is not None:
                        return self._email_taken(operation, request.email, already_exists)

                user.email = request.email
                user.first_name = request.first_name
                user.last_name = request.last_name
                user.role = request.role
                user.is_active = request.is_active

                try:
                    await store.update(user)
                except IntegrityError:
                    await store.session.rollback()
                    return self._email_taken(operation, request.email, already_exists)

            events.log_user_updated(user.id, user.email, user.is_active)
            return Result.success(UserRecord.from_user(user))

        except Exception:
            return self._internal(operation, user_id=request.id, email=request.email)

    async def delete_user(self, request: DeleteUserRequest) -> Result[DeleteUserResponse]:
        """Logical delete: the row stays and is only marked inactive."""
        operation = "DeleteUser"
        try:
            events.log_call(operation, user_id=request.id)

            violations = validate_delete_user(request)
            if violations:
                return self._invalid(operation, violations)

            async with self._store() as store:
                user = await store.get_by_id(request.id)
                if user is None:
                    return self._not_found(operation, request.id)

                user.is_active = False
                await store.update(user)

            events.log_user_deleted(user.id)
            return Result.success(DeleteUserResponse(
                success=True,
                message=f"User with ID {request.id} deleted successfully"
            ))

        except Exception:
            return self._internal(operation, user_id=request.id)


def get_user_service() -> UserService:
    """UserService dependency bound to the application database."""
    return UserService(get_session_factory())
