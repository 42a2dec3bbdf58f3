from __future__ import annotations
import logging
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from .config import AuthConfig
from .contracts import (
    AccessTokenClaims, FieldError, FieldMessages, LoginResult, NewUser,
    RefreshResult, RegisterResult, SessionDeliveryPort, User, UserStorePort,
)
from .cookies import parse_bearer, refresh_cookie_options
from .errors import DuplicateUserError, InvalidToken
from .passwords import PasswordHasher
from .tokens import TokenService
from .validation import normalize_username, validate_registration

logger = logging.getLogger("authservice.service")


def _duplicate_error(field: str) -> FieldError:
    if field == "email":
        return FieldError(field="email", message=FieldMessages.EMAIL_TAKEN)
    return FieldError(field="username", message=FieldMessages.USERNAME_TAKEN)


class AuthService:
    """
    Orchestrates registration, login, refresh and revocation on top of the
    user store, the password hasher and the token service.

    Expected failures come back as result models. Unexpected ones are logged
    and downgraded to a generic failure; nothing is raised to the caller.
    """

    def __init__(
        self,
        *,
        user_store: UserStorePort,
        cfg: AuthConfig,
        tokens: Optional[TokenService] = None,
        hasher: Optional[PasswordHasher] = None,
    ):
        self.user_store = user_store
        self.cfg = cfg
        self.tokens = tokens or TokenService(cfg)
        self.hasher = hasher or PasswordHasher(rounds=cfg.bcrypt_rounds)

    # --------- Core operations ----------
    async def register(self, email: str, username: str, password: str) -> RegisterResult:
        trimmed_email = (email or "").strip()
        trimmed_username = (username or "").strip()
        username_key = normalize_username(trimmed_username)

        errors = validate_registration(
            trimmed_email, trimmed_username, password or "",
            password_min_length=self.cfg.password_min_length,
        )
        if errors:
            logger.debug("register.invalid fields=%s", ",".join(e.field for e in errors))
            return RegisterResult(errors=errors)

        try:
            existing = await self.user_store.find_by_email_or_username_key(trimmed_email, username_key)
            if existing is not None:
                field = "email" if existing.email == trimmed_email else "username"
                logger.debug("register.duplicate field=%s", field)
                return RegisterResult(errors=[_duplicate_error(field)])

            password_hash = await run_in_threadpool(self.hasher.hash, password)
            user = await self.user_store.create(
                NewUser(
                    email=trimmed_email,
                    username=trimmed_username,
                    username_key=username_key,
                    password_hash=password_hash,
                )
            )
        except DuplicateUserError as ex:
            # lost a race against a concurrent registration; the store rejected it
            logger.debug("register.duplicate field=%s source=store", ex.field)
            return RegisterResult(errors=[_duplicate_error(ex.field)])
        except Exception:
            logger.exception("register.failed")
            return RegisterResult(ok=False)

        logger.info("register.ok user_id=%s", user.id)
        return RegisterResult(ok=True)

    async def login(self, email_or_username: str, password: str, delivery: SessionDeliveryPort) -> LoginResult:
        # checks are sequential and return on the first failure
        identifier = (email_or_username or "").strip()
        if not identifier:
            return LoginResult(errors=[FieldError(field="email", message=FieldMessages.EMAIL_REQUIRED)])

        try:
            user = await self.user_store.find_by_email_or_username_key(identifier, normalize_username(identifier))
            if user is None:
                logger.debug("login.rejected reason=not_found")
                return LoginResult(errors=[FieldError(field="email", message=FieldMessages.ACCOUNT_NOT_FOUND)])

            valid = await run_in_threadpool(self.hasher.verify, password or "", user.password_hash)
            if not valid:
                logger.debug("login.rejected reason=bad_password user_id=%s", user.id)
                return LoginResult(errors=[FieldError(field="password", message=FieldMessages.PASSWORD_WRONG)])

            delivery.set_refresh_cookie(self.tokens.issue_refresh(user), refresh_cookie_options(self.cfg))
            access_token = self.tokens.issue_access(user)
        except Exception:
            logger.exception("login.failed")
            return LoginResult(errors=[])

        logger.info("login.ok user_id=%s", user.id)
        return LoginResult(access_token=access_token, user=user.public())

    async def refresh(self, refresh_token: Optional[str], delivery: SessionDeliveryPort) -> RefreshResult:
        failed = RefreshResult(ok=False, access_token="")
        if not refresh_token:
            return failed

        try:
            claims = self.tokens.verify_refresh(refresh_token)
            user = await self.user_store.find_by_id(claims.user_id)
            if user is None:
                logger.warning("refresh.rejected reason=unknown_user user_id=%s", claims.user_id)
                return failed
            if claims.token_version != user.token_version:
                logger.warning(
                    "refresh.rejected reason=revoked user_id=%s token_version=%s current=%s",
                    user.id, claims.token_version, user.token_version,
                )
                return failed

            # rotate on every use
            delivery.set_refresh_cookie(self.tokens.issue_refresh(user), refresh_cookie_options(self.cfg))
            access_token = self.tokens.issue_access(user)
        except InvalidToken:
            logger.warning("refresh.rejected reason=invalid_token")
            return failed
        except Exception:
            logger.exception("refresh.failed")
            return failed

        logger.info("refresh.ok user_id=%s", user.id)
        return RefreshResult(ok=True, access_token=access_token)

    async def revoke_all_sessions(self, user_id: str) -> bool:
        """Bump the user's token version so every outstanding refresh token goes stale."""
        try:
            updated = await self.user_store.increment_token_version(user_id)
        except Exception:
            logger.exception("revoke.failed user_id=%s", user_id)
            return False
        if updated is None:
            logger.warning("revoke.unknown_user user_id=%s", user_id)
            return False
        logger.info("revoke.ok user_id=%s token_version=%s", user_id, updated.token_version)
        return True

    def logout(self, delivery: SessionDeliveryPort) -> bool:
        # client-side only: access tokens in flight stay valid until they expire
        delivery.clear_refresh_cookie()
        logger.info("logout.ok")
        return True

    # --------- Access-token consumers ----------
    def authenticate(self, authorization: Optional[str]) -> Optional[AccessTokenClaims]:
        token = parse_bearer(authorization)
        if token is None:
            return None
        try:
            return self.tokens.verify_access(token)
        except InvalidToken:
            return None

    async def me(self, authorization: Optional[str]) -> Optional[User]:
        claims = self.authenticate(authorization)
        if claims is None:
            return None
        try:
            record = await self.user_store.find_by_id(claims.user_id)
        except Exception:
            logger.exception("me.failed user_id=%s", claims.user_id)
            return None
        return record.public() if record else None

    def hello(self, claims: AccessTokenClaims) -> str:
        return f"Your user id is: {claims.user_id}"

    async def list_users(self) -> List[User]:
        try:
            records = await self.user_store.list_users()
        except Exception:
            logger.exception("list_users.failed")
            return []
        return [r.public() for r in records]


_auth_service: Optional[AuthService] = None


def set_auth_service(svc: AuthService) -> None:
    global _auth_service
    _auth_service = svc


def get_auth_service() -> AuthService:
    if _auth_service is None:
        raise RuntimeError("AuthService is not configured; call set_auth_service() first")
    return _auth_service
