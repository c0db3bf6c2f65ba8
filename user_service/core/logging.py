"""Logging configuration and utilities."""
import logging
import sys
from typing import Any, Dict, List

import structlog
from structlog.stdlib import LoggerFactory

from ..config import settings


def configure_logging():
    """Configure structured logging."""

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.monitoring.log_level.upper()),
    )

    # Set third-party log levels
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class RequestLogger:
    """Request logging utility."""

    @staticmethod
    def log_request(
        method: str,
        path: str,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log incoming request."""
        logger = structlog.get_logger("api.request")
        logger.info(
            "Request started",
            method=method,
            path=path,
            request_id=request_id,
            **(extra_data or {})
        )

    @staticmethod
    def log_response(
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log response."""
        logger = structlog.get_logger("api.response")
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=response_time_ms,
            request_id=request_id,
            **(extra_data or {})
        )


class UserEventLogger:
    """User management event logging utility."""

    @staticmethod
    def log_call(operation: str, **context: Any):
        """Log an incoming operation call."""
        logger = structlog.get_logger("business.user")
        logger.info(
            f"{operation} called",
            event_type="rpc_called",
            operation=operation,
            **context
        )

    @staticmethod
    def log_validation_failed(operation: str, errors: List[str]):
        """Log rejected request input."""
        logger = structlog.get_logger("business.user")
        logger.warning(
            "Validation failed",
            event_type="validation_failed",
            operation=operation,
            errors=errors
        )

    @staticmethod
    def log_users_listed(
        page_number: int,
        page_size: int,
        active_only: bool,
        found: int
    ):
        """Log a loaded user page."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "Users listed",
            event_type="users_listed",
            page_number=page_number,
            page_size=page_size,
            active_only=active_only,
            found=found
        )

    @staticmethod
    def log_list_cancelled(sent: int, total: int):
        """Log a user stream stopped by the caller."""
        logger = structlog.get_logger("business.user")
        logger.warning(
            "ListUsers cancelled by the client",
            event_type="users_list_cancelled",
            sent=sent,
            total=total
        )

    @staticmethod
    def log_user_created(user_id: int, email: str, role: str):
        """Log user creation."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User created",
            event_type="user_created",
            user_id=user_id,
            email=email,
            role=role
        )

    @staticmethod
    def log_user_updated(user_id: int, email: str, is_active: bool):
        """Log user update."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User updated",
            event_type="user_updated",
            user_id=user_id,
            email=email,
            is_active=is_active
        )

    @staticmethod
    def log_user_deleted(user_id: int):
        """Log logical deletion."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User deleted (logical)",
            event_type="user_deleted",
            user_id=user_id
        )

    @staticmethod
    def log_seed_skipped(existing: int):
        logger = structlog.get_logger("business.seed")
        logger.info(
            "Database already contains users, skipping seed",
            event_type="seed_skipped",
            existing=existing
        )

    @staticmethod
    def log_seed_completed(inserted: int):
        logger = structlog.get_logger("business.seed")
        logger.info(
            "Database seeded",
            event_type="seed_completed",
            inserted=inserted
        )
