"""User RPC message schemas.

Request fields default to the zero value of their type so that absent and
empty inputs reach the validation rules instead of failing schema parsing.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from ..config import settings
from ..models.user import User
from .common import BaseSchema, SuccessResponse


class ListUsersRequest(BaseSchema):
    """ListUsers request."""

    page_number: int = Field(default=1, description="1-based page number")
    page_size: int = Field(
        default_factory=lambda: settings.users.default_page_size,
        description="Users per page"
    )
    active_only: bool = Field(default=False, description="Only return active users")

    @property
    def offset(self) -> int:
        """Calculate offset for database queries."""
        return (self.page_number - 1) * self.page_size


class GetUserRequest(BaseSchema):
    """GetUser request."""

    id: int = Field(default=0, description="User ID")


class CreateUserRequest(BaseSchema):
    """CreateUser request."""

    email: str = Field(default="", description="User email address")
    password: str = Field(default="", description="Plaintext password")
    first_name: str = Field(default="", description="First name")
    last_name: str = Field(default="", description="Last name")
    role: str = Field(default="", description="User role, defaulted when blank")


class UpdateUserRequest(BaseSchema):
    """UpdateUser request. Every mutable field is overwritten."""

    id: int = Field(default=0, description="User ID")
    email: str = Field(default="", description="User email address")
    first_name: str = Field(default="", description="First name")
    last_name: str = Field(default="", description="Last name")
    role: str = Field(default="", description="User role")
    is_active: bool = Field(default=False, description="User active status")


class DeleteUserRequest(BaseSchema):
    """DeleteUser request."""

    id: int = Field(default=0, description="User ID")


def format_timestamp(value: Optional[datetime]) -> str:
    """ISO-8601 in UTC, or an empty string when unset."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class UserRecord(BaseSchema):
    """User as returned to callers. Never carries the password hash."""

    id: int = Field(..., description="User ID")
    email: str = Field(..., description="User email address")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    role: str = Field(..., description="User role")
    created_at: str = Field(..., description="Creation time, ISO-8601")
    last_login: str = Field("", description="Last login time, ISO-8601 or empty")
    is_active: bool = Field(..., description="User active status")

    @classmethod
    def from_user(cls, user: User) -> "UserRecord":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            created_at=format_timestamp(user.created_at),
            last_login=format_timestamp(user.last_login),
            is_active=user.is_active,
        )


class DeleteUserResponse(SuccessResponse):
    """DeleteUser response."""
