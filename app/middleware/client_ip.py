"""Client IP middleware.

Resolves the originating client IP once per request (proxy headers honoured
only from trusted proxies) and stores it in request.state.client_ip for the
login rate limit key and lockout logging. Uses raw ASGI (no
BaseHTTPMiddleware).
"""

from collections.abc import Iterable
from typing import Callable

from app.shared.utils.client_ip import DEFAULT_TRUSTED_PROXIES, client_ip_or_unknown


def _scope_headers(scope: dict) -> dict[str, str]:
    """Lowercase header map from ASGI (bytes, bytes) pairs; first value wins."""
    headers: dict[str, str] = {}
    for k, v in scope.get("headers", []):
        headers.setdefault(k.decode("latin-1").lower(), v.decode("latin-1"))
    return headers


def ClientIPMiddleware(
    app: Callable,
    trusted_proxies: Iterable[str] = DEFAULT_TRUSTED_PROXIES,
) -> Callable:
    """Set scope state client_ip on each HTTP request. Raw ASGI."""
    trusted = frozenset(trusted_proxies)

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        client = scope.get("client")
        remote_addr = client[0] if client else None
        scope.setdefault("state", {})["client_ip"] = client_ip_or_unknown(
            _scope_headers(scope), remote_addr, trusted
        )
        await app(scope, receive, send)

    return asgi_app
