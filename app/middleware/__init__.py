"""ASGI middleware."""

from app.middleware.client_ip import ClientIPMiddleware

__all__ = ["ClientIPMiddleware"]
