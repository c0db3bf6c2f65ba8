"""Pydantic schemas module."""
from .user import (
    ListUsersRequest,
    GetUserRequest,
    CreateUserRequest,
    UpdateUserRequest,
    DeleteUserRequest,
    DeleteUserResponse,
    UserRecord,
)
from .common import (
    ErrorResponse,
    HealthResponse,
    SuccessResponse,
)

__all__ = [
    # User
    "ListUsersRequest",
    "GetUserRequest",
    "CreateUserRequest",
    "UpdateUserRequest",
    "DeleteUserRequest",
    "DeleteUserResponse",
    "UserRecord",
    # Common
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
]
