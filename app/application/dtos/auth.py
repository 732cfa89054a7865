"""DTOs for authentication use cases."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenPair:
    """Access + refresh token issued on login or refresh."""

    access_token: str
    refresh_token: str
    expires_in: int
    email: str
    name: str
    token_type: str = "Bearer"
