"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules (e.g. auth) can use
the same instance without circular imports. Keyed by the client IP resolved
by ClientIPMiddleware, falling back to the socket peer.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address


def client_ip_key(request: Request) -> str:
    """Rate limit key: proxy-aware client IP when available."""
    client_ip = getattr(request.state, "client_ip", None)
    return client_ip or get_remote_address(request)


limiter = Limiter(key_func=client_ip_key)

# Single source of truth for rate limit strings and decorators.
LOGIN_LIMIT = "10/minute"
REFRESH_LIMIT = "30/minute"
INTERACTION_LIMIT = "120/minute"

limit_auth = limiter.limit(LOGIN_LIMIT)
limit_refresh = limiter.limit(REFRESH_LIMIT)
limit_interactions = limiter.limit(INTERACTION_LIMIT)
