from __future__ import annotations
from typing import Optional

from fastapi import Response

from .config import AuthConfig
from .contracts import CookieOptions, SessionDeliveryPort


def refresh_cookie_options(cfg: AuthConfig) -> CookieOptions:
    return CookieOptions(http_only=True, path=cfg.refresh_cookie_path, secure=cfg.is_production)


class ResponseCookieDelivery(SessionDeliveryPort):
    """Delivers the refresh token as an HTTP-only cookie on an outgoing response."""

    def __init__(self, response: Response, cfg: AuthConfig):
        self.response = response
        self.cfg = cfg

    def set_refresh_cookie(self, value: str, options: CookieOptions) -> None:
        self.response.set_cookie(
            key=self.cfg.refresh_cookie_name,
            value=value,
            httponly=options.http_only,
            path=options.path,
            secure=options.secure,
        )

    def clear_refresh_cookie(self) -> None:
        self.set_refresh_cookie("", refresh_cookie_options(self.cfg))


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an `Authorization: Bearer <token>` value.
    Absent or malformed values yield None.
    """
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None
