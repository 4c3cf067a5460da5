"""
Password hashing with bcrypt.
"""

import bcrypt

# bcrypt only uses the first 72 bytes of a password.
_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted bcrypt hashing."""

    def __init__(self, rounds: int = 10):
        self._rounds = rounds

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        encoded = password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
