"""SHA-256 helpers for values that must not be stored in clear (IPs, tokens)."""

import hashlib


def sha256_hex(value: str, length: int | None = None) -> str:
    """Return the lowercase hex SHA-256 of value, optionally truncated.

    Args:
        value: Text to hash (UTF-8).
        length: Number of leading hex characters to keep; None for all 64.

    Returns:
        Hex digest.
    """
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()
    if length is None:
        return digest
    if length <= 0 or length > len(digest):
        raise ValueError(f"length must be in 1..{len(digest)}, got {length}")
    return digest[:length]
