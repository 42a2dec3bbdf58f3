from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings

PRODUCTION_ENVIRONMENTS = ("prod", "production")
DEFAULT_ACCESS_SECRET = "change-me-access-secret"
DEFAULT_REFRESH_SECRET = "change-me-refresh-secret"


@dataclass(frozen=True)
class AuthConfig:
    """Immutable auth configuration, injected into TokenService and AuthService."""
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl_seconds: int = 900          # 15 minutes
    refresh_ttl_seconds: int = 604800      # 7 days
    bcrypt_rounds: int = 10
    refresh_cookie_name: str = "nwid"
    refresh_cookie_path: str = "/refresh"
    environment: str = "dev"
    password_min_length: int = 1
    cors_origins: Tuple[str, ...] = ("http://localhost:3000",)

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("AuthConfig requires non-empty access and refresh secrets")
        if self.access_secret == self.refresh_secret:
            raise ValueError("access and refresh secrets must differ")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS


class AuthSettings(BaseSettings):
    JWT_ACCESS_TOKEN_SECRET: str = Field(default=DEFAULT_ACCESS_SECRET)
    JWT_REFRESH_TOKEN_SECRET: str = Field(default=DEFAULT_REFRESH_SECRET)
    APP_ENV: str = Field(default="dev")
    ACCESS_TTL_SECONDS: int = Field(default=900)
    REFRESH_TTL_SECONDS: int = Field(default=604800)
    BCRYPT_ROUNDS: int = Field(default=10)
    REFRESH_COOKIE_NAME: str = Field(default="nwid")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    class Config:
        env_file = ".env"
        case_sensitive = False

    def to_config(self) -> AuthConfig:
        if self.APP_ENV.lower() in PRODUCTION_ENVIRONMENTS and (
            self.JWT_ACCESS_TOKEN_SECRET == DEFAULT_ACCESS_SECRET
            or self.JWT_REFRESH_TOKEN_SECRET == DEFAULT_REFRESH_SECRET
        ):
            raise ValueError("JWT_ACCESS_TOKEN_SECRET and JWT_REFRESH_TOKEN_SECRET must be set in production")
        return AuthConfig(
            access_secret=self.JWT_ACCESS_TOKEN_SECRET,
            refresh_secret=self.JWT_REFRESH_TOKEN_SECRET,
            access_ttl_seconds=self.ACCESS_TTL_SECONDS,
            refresh_ttl_seconds=self.REFRESH_TTL_SECONDS,
            bcrypt_rounds=self.BCRYPT_ROUNDS,
            refresh_cookie_name=self.REFRESH_COOKIE_NAME,
            environment=self.APP_ENV,
            cors_origins=tuple(self.CORS_ORIGINS),
        )
