"""Fallback combinator for store calls.

Each service states its degradation policy at the call site:

    blocked = await or_else(store.has_key(key), False, operation="is_blocked")

Only StoreUnavailableError is converted; every other exception propagates.
"""

import logging
from collections.abc import Awaitable
from typing import TypeVar

from app.infrastructure.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def or_else(call: Awaitable[T], default: T, *, operation: str) -> T:
    """Await call; on StoreUnavailableError log and return default.

    Args:
        call: Awaitable store operation.
        default: Value to use when the store cannot answer.
        operation: Short name for logs (e.g. 'dedup.view').

    Returns:
        The store result, or default when the store is unavailable.
    """
    try:
        return await call
    except StoreUnavailableError as e:
        logger.warning(
            "Store unavailable for %s (%s); falling back to %r",
            operation,
            e.reason,
            default,
        )
        return default
