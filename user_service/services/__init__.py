"""Services module."""
from .user_store import UserStore
from .user_service import UserService, get_user_service
from .seed import initialize_database, seed_users

__all__ = [
    "UserStore",
    "UserService",
    "get_user_service",
    "initialize_database",
    "seed_users",
]
