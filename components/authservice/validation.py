from __future__ import annotations
import re
from typing import List, Optional

from .contracts import FieldError, FieldMessages
from .passwords import BCRYPT_MAX_PASSWORD_BYTES

USERNAME_MIN_LENGTH = 3

# RFC 5322 subset: dot-atom or quoted-string local part; hostname or bracketed IPv4 literal domain
_ATOM = r"[a-z0-9!#$%&'*+/=?^_`{|}~-]+"
_DOT_ATOM = _ATOM + r"(?:\." + _ATOM + r")*"
_QUOTED = r'"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x21\x23-\x5b\x5d-\x7f]|\\[\x01-\x09\x0b\x0c\x0e-\x7f])*"'
_HOSTNAME = r"(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?"
_OCTET = r"(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9]?[0-9])"
_LITERAL = (
    r"\[(?:" + _OCTET + r"\.){3}(?:" + _OCTET
    + r"|[a-z0-9-]*[a-z0-9]:(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x21-\x5a\x53-\x7f]|\\[\x01-\x09\x0b\x0c\x0e-\x7f])+)\]"
)

EMAIL_PATTERN = re.compile(
    "(?:" + _DOT_ATOM + "|" + _QUOTED + ")@(?:" + _HOSTNAME + "|" + _LITERAL + ")",
    re.IGNORECASE,
)


def normalize_username(username: str) -> str:
    """Lookup key used for case-insensitive username uniqueness."""
    return username.strip().lower()


def validate_email(raw: str) -> Optional[FieldError]:
    value = (raw or "").strip()
    if not value:
        return FieldError(field="email", message=FieldMessages.EMAIL_REQUIRED)
    if not EMAIL_PATTERN.fullmatch(value):
        return FieldError(field="email", message=FieldMessages.EMAIL_INVALID)
    return None


def validate_username(raw: str) -> Optional[FieldError]:
    value = (raw or "").strip()
    if not value:
        return FieldError(field="username", message=FieldMessages.USERNAME_REQUIRED)
    if len(value) < USERNAME_MIN_LENGTH:
        return FieldError(field="username", message=FieldMessages.USERNAME_TOO_SHORT)
    return None


def validate_password(raw: str, min_length: int = 1) -> Optional[FieldError]:
    """
    Non-empty after trimming, at least `min_length` characters, and short
    enough for bcrypt. At most one error is returned.
    """
    raw = raw or ""
    if not raw.strip():
        return FieldError(field="password", message=FieldMessages.PASSWORD_REQUIRED)
    if len(raw) < min_length:
        return FieldError(field="password", message=FieldMessages.PASSWORD_TOO_SHORT.format(n=min_length))
    if len(raw.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        return FieldError(field="password", message=FieldMessages.PASSWORD_TOO_LONG)
    return None


def validate_registration(email: str, username: str, password: str, *, password_min_length: int = 1) -> List[FieldError]:
    """Run every validator and collect all errors (no short-circuit)."""
    checks = (
        validate_email(email),
        validate_username(username),
        validate_password(password, min_length=password_min_length),
    )
    return [err for err in checks if err is not None]
