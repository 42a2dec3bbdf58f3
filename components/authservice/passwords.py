"""
Password hashing: one-way bcrypt hash and verify of plaintext passwords.
"""

from __future__ import annotations
import bcrypt

from .errors import HashError

# bcrypt only considers the first 72 bytes and newer releases reject longer input
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    Salted bcrypt hasher. The encoded hash embeds salt and cost, so `verify`
    needs nothing but the stored string.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a plaintext password.

        Raises:
            HashError: if bcrypt fails (including over-long input)
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
        except (ValueError, TypeError) as ex:
            raise HashError("password hashing failed") from ex

    def verify(self, password: str, encoded: str) -> bool:
        """
        True iff `password` matches `encoded`.

        A mismatch is never an error. A malformed `encoded` raises HashError.
        """
        raw = password.encode("utf-8")
        if len(raw) > BCRYPT_MAX_PASSWORD_BYTES:
            # such a password can never have been stored
            return False
        try:
            return bcrypt.checkpw(raw, encoded.encode("utf-8"))
        except (ValueError, TypeError) as ex:
            raise HashError("malformed password hash") from ex
