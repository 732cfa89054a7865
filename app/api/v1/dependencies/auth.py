"""Bearer token dependencies for protected (admin) routes."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.infrastructure.security.jwt import verify_token

ADMIN_ROLE = "ADMIN"

_http_bearer = HTTPBearer(auto_error=False)


def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> dict[str, Any]:
    """Return verified access token claims; 401 if missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        return verify_token(credentials.credentials)
    except ValueError:
        raise AuthenticationException("Invalid or expired token") from None


def get_current_admin(
    claims: Annotated[dict[str, Any], Depends(get_current_claims)],
) -> dict[str, Any]:
    """Require the ADMIN role claim; 403 otherwise."""
    if claims.get("role") != ADMIN_ROLE:
        raise AuthorizationException("Admin role required")
    return claims
