from __future__ import annotations
import logging
import time
from typing import Any, Dict, Optional, Protocol, Type, TypeVar

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import BaseModel, ValidationError

from .config import AuthConfig
from .contracts import AccessTokenClaims, RefreshTokenClaims, User
from .errors import InvalidToken

logger = logging.getLogger("authservice.tokens")

ClaimsT = TypeVar("ClaimsT", bound=BaseModel)


class ClockPort(Protocol):
    def now_utc_ts(self) -> int: ...


class SystemClock(ClockPort):
    def now_utc_ts(self) -> int:
        return int(time.time())


class TokenService:
    """
    Issues and verifies the two token classes. Access and refresh tokens are
    signed with distinct secrets; expiry is enforced by PyJWT on decode.
    Does not consult user state: the refresh version check belongs to AuthService.
    """

    def __init__(self, cfg: AuthConfig, clock: Optional[ClockPort] = None):
        self.cfg = cfg
        self.clock = clock or SystemClock()

    # --------- Issue ----------
    def issue_access(self, user: User) -> str:
        claims = AccessTokenClaims(
            user_id=user.id,
            exp=self.clock.now_utc_ts() + self.cfg.access_ttl_seconds,
        )
        return self._sign(claims, self.cfg.access_secret)

    def issue_refresh(self, user: User) -> str:
        claims = RefreshTokenClaims(
            user_id=user.id,
            token_version=user.token_version,
            exp=self.clock.now_utc_ts() + self.cfg.refresh_ttl_seconds,
        )
        return self._sign(claims, self.cfg.refresh_secret)

    # --------- Verify ----------
    def verify_access(self, token: str) -> AccessTokenClaims:
        return self._verify(token, self.cfg.access_secret, AccessTokenClaims)

    def verify_refresh(self, token: str) -> RefreshTokenClaims:
        return self._verify(token, self.cfg.refresh_secret, RefreshTokenClaims)

    # --------- Helpers ----------
    def _sign(self, claims: BaseModel, secret: str) -> str:
        payload: Dict[str, Any] = claims.model_dump(by_alias=True)
        return jwt.encode(payload, secret, algorithm=self.cfg.algorithm)

    def _verify(self, token: str, secret: str, model: Type[ClaimsT]) -> ClaimsT:
        # bad signature, malformed payload and expiry are not distinguished for callers
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.cfg.algorithm],
                options={"require": ["exp"]},
            )
            return model.model_validate(payload)
        except (InvalidTokenError, ValidationError) as ex:
            logger.debug("token.rejected kind=%s reason=%s", model.__name__, type(ex).__name__)
            raise InvalidToken("invalid token") from ex
