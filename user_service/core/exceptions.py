"""Status codes and exceptions surfaced by the service."""
from enum import Enum


class StatusCode(str, Enum):
    """Failure kinds reported to RPC callers."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INTERNAL = "INTERNAL"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    StatusCode.INVALID_ARGUMENT: 400,
    StatusCode.NOT_FOUND: 404,
    StatusCode.ALREADY_EXISTS: 409,
    StatusCode.INTERNAL: 500,
}

INTERNAL_ERROR_MESSAGE = "Internal error while processing the request"


class RpcError(Exception):
    """Failure raised at the transport boundary of an RPC call."""

    def __init__(
        self,
        message: str,
        status: StatusCode = StatusCode.INTERNAL,
        details: dict = None
    ):
        self.message = message
        self.status = status
        self.status_code = status.http_status
        self.error_code = status.value
        self.details = details or {}
        super().__init__(self.message)


class PasswordHashError(Exception):
    """Stored password hash is malformed and cannot be checked."""
