"""Span helpers for the service layer.

Spans are created through the OpenTelemetry API only; they are no-ops
unless the hosting process installs an SDK tracer provider.
"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

# Argument names recorded as span attributes. Tokens, passwords, emails
# and raw IPs are never recorded.
_SAFE_SPAN_ATTR_KEYS = frozenset({"user_id", "slug", "action", "namespace", "pattern"})


def _set_safe_span_attrs(span: trace.Span, arguments: dict[str, Any]) -> None:
    for key, value in arguments.items():
        if key in _SAFE_SPAN_ATTR_KEYS:
            span.set_attribute(f"arg.{key}", str(value))


def traced(operation_name: str | None = None) -> Callable:
    """Wrap a coroutine function in a span named operation_name.

    Allowlisted arguments (positional or keyword) become span attributes;
    an exception marks the span as failed and is re-raised.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                try:
                    bound = signature.bind_partial(*args, **kwargs)
                except TypeError:
                    bound = None
                if bound is not None:
                    _set_safe_span_attrs(span, bound.arguments)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, type(e).__name__))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_event(name: str, attributes: dict[str, Any] | None = None) -> None:
    """Add an event to the current span (e.g. 'refresh_token.reuse_detected')."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=attributes or {})
