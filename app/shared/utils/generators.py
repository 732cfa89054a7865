"""ID and value generators (CUID row ids, opaque tokens)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# 64 random bytes -> 86 URL-safe characters.
OPAQUE_TOKEN_BYTES = 64


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_opaque_token(num_bytes: int = OPAQUE_TOKEN_BYTES) -> str:
    """Return a cryptographically random URL-safe token (no padding)."""
    return secrets.token_urlsafe(num_bytes)
