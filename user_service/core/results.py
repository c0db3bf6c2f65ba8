"""Result types returned by the request handlers.

Handlers never raise for expected business failures. They return a
``Result`` holding either the success payload or a ``Failure`` tagged with a
``StatusCode``; the transport converts failures with ``Result.unwrap()``.
"""
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from .exceptions import RpcError, StatusCode

T = TypeVar("T")


@dataclass(frozen=True)
class FieldViolation:
    """A single failed validation rule."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Failure:
    """Tagged failure of a handler call."""

    status: StatusCode
    message: str
    violations: List[FieldViolation] = field(default_factory=list)

    def to_error(self) -> RpcError:
        details = {}
        if self.violations:
            details["violations"] = [
                {"field": v.field, "message": v.message} for v in self.violations
            ]
        return RpcError(self.message, status=self.status, details=details)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success payload or failure of a handler call."""

    value: Optional[T] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(
        cls,
        status: StatusCode,
        message: str,
        violations: Optional[List[FieldViolation]] = None
    ) -> "Result[T]":
        return cls(failure=Failure(status, message, list(violations or [])))

    def unwrap(self) -> T:
        """Return the payload or raise the failure as an ``RpcError``."""
        if self.failure is not None:
            raise self.failure.to_error()
        return self.value
