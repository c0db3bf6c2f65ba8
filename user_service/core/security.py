"""Password hashing."""
from typing import Optional

import bcrypt

from ..config import settings
from .exceptions import PasswordHashError

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """bcrypt based password hasher.

    Passwords longer than 72 bytes are truncated before hashing and
    verifying, so any two passwords sharing those bytes verify alike.
    """

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or settings.auth.bcrypt_rounds

    def hash(self, password: str) -> str:
        """Hash password using bcrypt with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode('utf-8')

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash.

        Raises ``PasswordHashError`` when the stored hash is not a bcrypt hash.
        """
        try:
            return bcrypt.checkpw(
                _password_bytes(plain_password),
                hashed_password.encode('utf-8')
            )
        except ValueError as e:
            raise PasswordHashError(f"Stored password hash is invalid: {e}") from e


# Global hasher instance
password_hasher = PasswordHasher()
