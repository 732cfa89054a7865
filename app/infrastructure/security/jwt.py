"""JWT access token creation and verification.

Access tokens are short-lived and stateless; the refresh token (opaque,
rotated, stored hashed) is what keeps a session alive. Uses app.core.config
for secret, algorithm and lifetime.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import get_settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    subject: str,
    *,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token for a user.

    Args:
        subject: User id (sub claim).
        email: User email (for display; never used for authorization).
        role: User role, checked by admin routes.
        expires_delta: Optional TTL; else settings.access_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(UTC)
    expire = now + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims: dict[str, Any] = {
        "sub": subject,
        "email": email,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": expire,
    }
    encoded = jwt.encode(
        claims,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode an access token. Returns the payload.

    Raises:
        ValueError: If token is invalid, expired, not an access token, or
            missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise ValueError("Token is not an access token")
    return payload
