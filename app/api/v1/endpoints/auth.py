"""Auth API: login, refresh token rotation and logout."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import get_auth_service
from app.application.dtos.auth import TokenPair
from app.application.services.auth_service import AuthService
from app.core.limiter import limit_auth, limit_refresh
from app.schemas.auth import LoginRequest, RefreshRequest, TokenResponse

router = APIRouter()


def _to_response(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
        expires_in=pair.expires_in,
        email=pair.email,
        name=pair.name,
    )


@router.post("/login", response_model=TokenResponse)
@limit_auth
async def login(
    request: Request,
    body: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Authenticate with email and password; return access and refresh tokens.

    423 while the account is locked; 401 with remaining attempts otherwise.
    """
    client_ip = getattr(request.state, "client_ip", None)
    pair = await auth_service.login(body.email, body.password, client_ip)
    return _to_response(pair)


@router.post("/refresh", response_model=TokenResponse)
@limit_refresh
async def refresh(
    request: Request,
    body: RefreshRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Exchange a refresh token for a new pair. The presented token is consumed."""
    pair = await auth_service.refresh(body.refresh_token)
    return _to_response(pair)


@router.post("/logout", status_code=204)
async def logout(
    body: RefreshRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Response:
    """Revoke the refresh token. Unknown tokens are accepted silently."""
    await auth_service.logout(body.refresh_token)
    return Response(status_code=204)
