from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from .contracts import AccessTokenClaims
from .service import AuthService, get_auth_service


def get_authorization_header(authorization: Optional[str] = Header(default=None, alias="Authorization")) -> Optional[str]:
    """
    Extract the Authorization header value (e.g., 'Bearer <token>').
    Using Header() ensures we get a plain string during real FastAPI requests.
    """
    return authorization


def optional_user(
    auth: AuthService = Depends(get_auth_service),
    authorization: Optional[str] = Depends(get_authorization_header),
) -> Optional[AccessTokenClaims]:
    """Claims of a valid bearer token, or None when absent or invalid."""
    return auth.authenticate(authorization)


def require_user(claims: Optional[AccessTokenClaims] = Depends(optional_user)) -> AccessTokenClaims:
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims
