from __future__ import annotations
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from .contracts import (
    AccessTokenClaims, LoginRequest, LoginResult, RefreshResult,
    RegisterRequest, RegisterResult, User,
)
from .cookies import ResponseCookieDelivery
from .deps import get_authorization_header, require_user
from .service import AuthService, get_auth_service

log = logging.getLogger("authservice.routes")

router = APIRouter(prefix="/auth", tags=["auth"])
refresh_router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResult, response_model_exclude_none=True)
async def register(req: RegisterRequest, svc: AuthService = Depends(get_auth_service)):
    return await svc.register(req.email, req.username, req.password)


@router.post("/login", response_model=LoginResult, response_model_exclude_none=True)
async def login(req: LoginRequest, response: Response, svc: AuthService = Depends(get_auth_service)):
    return await svc.login(req.email, req.password, ResponseCookieDelivery(response, svc.cfg))


@router.post("/logout")
def logout(response: Response, svc: AuthService = Depends(get_auth_service)) -> bool:
    return svc.logout(ResponseCookieDelivery(response, svc.cfg))


@router.post("/revoke/{user_id}")
async def revoke_refresh_tokens_for_user(
    user_id: str,
    claims: AccessTokenClaims = Depends(require_user),
    svc: AuthService = Depends(get_auth_service),
) -> bool:
    # a caller may only revoke its own sessions
    if claims.user_id != user_id:
        log.warning("revoke.forbidden caller=%s target=%s", claims.user_id, user_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot revoke sessions of another user")
    return await svc.revoke_all_sessions(user_id)


@router.get("/me", response_model=Optional[User])
async def me(
    svc: AuthService = Depends(get_auth_service),
    authorization: Optional[str] = Depends(get_authorization_header),
):
    return await svc.me(authorization)


@router.get("/hello")
def hello(claims: AccessTokenClaims = Depends(require_user), svc: AuthService = Depends(get_auth_service)) -> str:
    return svc.hello(claims)


@router.get("/users", response_model=List[User])
async def users(svc: AuthService = Depends(get_auth_service)):
    return await svc.list_users()


@refresh_router.post("/refresh", response_model=RefreshResult)
async def refresh(request: Request, response: Response, svc: AuthService = Depends(get_auth_service)):
    # cookie name is configurable, so read it from the request rather than a Cookie() param
    token = request.cookies.get(svc.cfg.refresh_cookie_name)
    if not token:
        log.debug("refresh.no_cookie")
    return await svc.refresh(token, ResponseCookieDelivery(response, svc.cfg))
