from __future__ import annotations
from .contracts import AuthErrorCodes


class AuthServiceError(Exception):
    """Base error for AuthService collaborators."""
    code: str = AuthErrorCodes.INTERNAL


class InternalError(AuthServiceError):
    """Library or persistence failure; never surfaced to callers in detail."""


class HashError(InternalError):
    code = AuthErrorCodes.HASH_FAILED


class StoreError(InternalError):
    code = AuthErrorCodes.STORE_FAILED


class AuthenticationError(AuthServiceError):
    """Missing, malformed or expired credentials."""


class InvalidToken(AuthenticationError):
    code = AuthErrorCodes.INVALID_TOKEN


class ConflictError(AuthServiceError):
    """A uniqueness constraint rejected a write."""


class DuplicateUserError(ConflictError):
    code = AuthErrorCodes.DUPLICATE_USER

    def __init__(self, field: str):
        super().__init__(f"duplicate {field}")
        self.field = field
