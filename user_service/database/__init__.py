"""Database module."""
from .engine import (
    close_db,
    create_session_factory,
    get_engine,
    get_session_factory,
    init_db,
    migrate_db,
)
from .session import get_db

__all__ = [
    "close_db",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
    "migrate_db",
    "get_db",
]
