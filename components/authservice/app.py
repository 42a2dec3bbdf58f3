from __future__ import annotations
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import AuthConfig, AuthSettings
from .routes import refresh_router, router
from .service import AuthService, set_auth_service
from .store import InMemoryUserStore

APP_NAME = "authservice"


def create_app(service: Optional[AuthService] = None, cfg: Optional[AuthConfig] = None) -> FastAPI:
    cfg = cfg or (service.cfg if service else AuthSettings().to_config())
    service = service or AuthService(user_store=InMemoryUserStore(), cfg=cfg)
    set_auth_service(service)

    app = FastAPI(title=APP_NAME)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(router)
    app.include_router(refresh_router)
    return app
