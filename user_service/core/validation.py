"""Request validation rules, one rule set per operation."""
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from ..config import settings
from ..schemas.user import (
    CreateUserRequest,
    DeleteUserRequest,
    GetUserRequest,
    ListUsersRequest,
    UpdateUserRequest,
)
from .results import FieldViolation

MIN_PASSWORD_LENGTH = 6

PAGE_NUMBER_MESSAGE = "Page number must be greater than zero"
PAGE_SIZE_MESSAGE = "Page size must be greater than zero"
USER_ID_MESSAGE = "User ID must be greater than zero"
EMAIL_MESSAGE = "A valid email is required"
PASSWORD_MESSAGE = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
FIRST_NAME_MESSAGE = "First name is required"
LAST_NAME_MESSAGE = "Last name is required"


def join_violations(violations: List[FieldViolation]) -> str:
    """Combine violation messages into the single caller-facing message."""
    return ", ".join(v.message for v in violations)


def is_valid_email(value: str) -> bool:
    if not value or not value.strip():
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _check_id(user_id: int) -> List[FieldViolation]:
    if user_id <= 0:
        return [FieldViolation("id", USER_ID_MESSAGE)]
    return []


def _check_profile(
    email: str,
    first_name: str,
    last_name: str,
    password: Optional[str] = None
) -> List[FieldViolation]:
    """Email, password (create only) and name rules, in that order."""
    violations = []
    if not is_valid_email(email):
        violations.append(FieldViolation("email", EMAIL_MESSAGE))
    if password is not None and (
        not password.strip() or len(password) < MIN_PASSWORD_LENGTH
    ):
        violations.append(FieldViolation("password", PASSWORD_MESSAGE))
    if not first_name.strip():
        violations.append(FieldViolation("firstName", FIRST_NAME_MESSAGE))
    if not last_name.strip():
        violations.append(FieldViolation("lastName", LAST_NAME_MESSAGE))
    return violations


def validate_list_users(request: ListUsersRequest) -> List[FieldViolation]:
    violations = []
    max_page_size = settings.users.max_page_size

    if request.page_number <= 0:
        violations.append(FieldViolation("pageNumber", PAGE_NUMBER_MESSAGE))
    if request.page_size <= 0:
        violations.append(FieldViolation("pageSize", PAGE_SIZE_MESSAGE))
    elif request.page_size > max_page_size:
        violations.append(
            FieldViolation("pageSize", f"Page size cannot exceed {max_page_size} items")
        )
    return violations


def validate_get_user(request: GetUserRequest) -> List[FieldViolation]:
    return _check_id(request.id)


def validate_create_user(request: CreateUserRequest) -> List[FieldViolation]:
    return _check_profile(
        request.email, request.first_name, request.last_name, password=request.password
    )


def validate_update_user(request: UpdateUserRequest) -> List[FieldViolation]:
    return _check_id(request.id) + _check_profile(
        request.email, request.first_name, request.last_name
    )


def validate_delete_user(request: DeleteUserRequest) -> List[FieldViolation]:
    return _check_id(request.id)
