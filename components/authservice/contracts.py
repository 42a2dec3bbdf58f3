from __future__ import annotations
from typing import List, Optional, Protocol, runtime_checkable
from pydantic import BaseModel, ConfigDict, Field, constr

# ---------- Domain Models ----------
class User(BaseModel):
    """Public view of a user record. Never carries the password hash."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    username: str
    token_version: int = Field(0, alias="tokenVersion")


class UserRecord(User):
    """Stored form of a user, owned by the user store."""
    username_key: str = Field(..., alias="usernameKey")
    password_hash: str = Field(..., alias="passwordHash", repr=False)

    def public(self) -> User:
        return User(id=self.id, email=self.email, username=self.username, token_version=self.token_version)


class NewUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: constr(min_length=1)
    username: constr(min_length=1)
    username_key: str = Field(..., alias="usernameKey")
    password_hash: str = Field(..., alias="passwordHash", repr=False)


class FieldError(BaseModel):
    field: str
    message: str


# ---------- Token claims (wire-exact) ----------
class AccessTokenClaims(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    exp: int


class RefreshTokenClaims(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    token_version: int = Field(..., alias="tokenVersion")
    exp: int


# ---------- Service I/O ----------
class RegisterRequest(BaseModel):
    email: str = ""
    username: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    # accepts either the email or the username
    email: str = ""
    password: str = ""


class RegisterResult(BaseModel):
    ok: Optional[bool] = None
    errors: Optional[List[FieldError]] = None


class LoginResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: Optional[str] = Field(None, alias="accessToken")
    user: Optional[User] = None
    errors: Optional[List[FieldError]] = None

    @property
    def ok(self) -> bool:
        return bool(self.access_token) and not self.errors


class RefreshResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    access_token: str = Field("", alias="accessToken")


class CookieOptions(BaseModel):
    http_only: bool = True
    path: str = "/refresh"
    secure: bool = False


# ---------- Ports (Contracts) ----------
@runtime_checkable
class UserStorePort(Protocol):
    """
    Contract for user persistence. `create` must enforce email/username_key
    uniqueness atomically and raise DuplicateUserError on violation;
    `increment_token_version` must be an atomic read-modify-write.
    """
    async def find_by_email_or_username_key(self, email: str, username_key: str) -> Optional[UserRecord]: ...
    async def find_by_id(self, user_id: str) -> Optional[UserRecord]: ...
    async def create(self, fields: NewUser) -> UserRecord: ...
    async def increment_token_version(self, user_id: str) -> Optional[UserRecord]: ...
    async def list_users(self) -> List[UserRecord]: ...


@runtime_checkable
class SessionDeliveryPort(Protocol):
    """Contract for handing the refresh token to the client (HTTP-only cookie)."""
    def set_refresh_cookie(self, value: str, options: CookieOptions) -> None: ...
    def clear_refresh_cookie(self) -> None: ...


# ---------- Errors ----------
class AuthErrorCodes:
    INVALID_TOKEN = "INVALID_TOKEN"
    HASH_FAILED = "HASH_FAILED"
    STORE_FAILED = "STORE_FAILED"
    DUPLICATE_USER = "DUPLICATE_USER"
    INTERNAL = "INTERNAL"


class FieldMessages:
    EMAIL_REQUIRED = "Email is required"
    EMAIL_INVALID = "Email is invalid"
    USERNAME_REQUIRED = "Username is required"
    USERNAME_TOO_SHORT = "Username must be at least 3 characters long"
    PASSWORD_REQUIRED = "Password is required"
    PASSWORD_TOO_SHORT = "Password must be at least {n} characters long"
    PASSWORD_TOO_LONG = "Password must be at most 72 bytes long"
    EMAIL_TAKEN = "Email is already linked to an account"
    USERNAME_TAKEN = "Username is already linked to an account"
    ACCOUNT_NOT_FOUND = "Email/Username could not be found"
    PASSWORD_WRONG = "Password is wrong"
