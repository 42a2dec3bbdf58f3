from .service import AuthService, get_auth_service, set_auth_service  # expose getter for DI
from .tokens import TokenService
from .passwords import PasswordHasher
from .store import InMemoryUserStore
from .config import AuthConfig, AuthSettings
from .deps import require_user, optional_user
from .routes import router as auth_router, refresh_router
from .app import create_app

__all__ = [
    "AuthService",
    "get_auth_service",
    "set_auth_service",
    "TokenService",
    "PasswordHasher",
    "InMemoryUserStore",
    "AuthConfig",
    "AuthSettings",
    "require_user",
    "optional_user",
    "auth_router",
    "refresh_router",
    "create_app",
]
