"""Key builders. Single place for key format (DRY).

Slugs and other inner components must not contain CACHE_KEY_SEP to avoid
ambiguous or colliding keys. Identities (emails) are always the trailing
component, so they are only normalized, not validated.
"""

from app.core.constants import (
    ARTICLES_CACHE_PREFIX,
    CACHE_KEY_SEP,
    COMMENTS_CACHE_PREFIX,
    FEED_CACHE_PREFIX,
    LIKE_PREFIX,
    LOCKOUT_NOTIFIED_PREFIX,
    LOCKOUT_PREFIX,
    LOGIN_ATTEMPT_PREFIX,
    SEARCH_CACHE_PREFIX,
    TAGS_CACHE_PREFIX,
    VIEW_PREFIX,
)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator.

    Args:
        value: String component used in a key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


# Redis SCAN MATCH (and fnmatch) metacharacters.
_GLOB_CHARS = frozenset("*?[]\\")


def validate_pattern_component(value: str, name: str) -> None:
    """Like _validate_key_component, and also reject glob metacharacters.

    Used for caller input that is interpolated into a SCAN match pattern,
    where "*" or "[" would widen an invalidation to the whole namespace.
    """
    _validate_key_component(value, name)
    found = sorted(_GLOB_CHARS.intersection(value))
    if found:
        raise ValueError(f"Key component {name!r} must not contain glob characters {found!r}")


def normalize_identity(identity: str) -> str:
    """Lowercase and strip an identity (e.g. email) so keys are case-insensitive."""
    return identity.strip().lower()


def login_attempt_key(identity: str) -> str:
    """Failed-login counter key."""
    return f"{LOGIN_ATTEMPT_PREFIX}{identity}"


def lockout_key(identity: str) -> str:
    """Lockout flag key; presence means blocked."""
    return f"{LOCKOUT_PREFIX}{identity}"


def lockout_notified_key(identity: str) -> str:
    """One-shot marker gating a single lockout email per episode."""
    return f"{LOCKOUT_NOTIFIED_PREFIX}{identity}"


def rate_limit_key(namespace: str, identity: str) -> str:
    """Rate limiter counter key (e.g. email_rate:user@test.com)."""
    _validate_key_component(namespace, "namespace")
    return f"{namespace}{CACHE_KEY_SEP}{identity}"


def view_marker_key(slug: str, ip_hash: str) -> str:
    """Per-IP view dedup marker for an article."""
    _validate_key_component(slug, "slug")
    return f"{VIEW_PREFIX}{slug}{CACHE_KEY_SEP}{ip_hash}"


def like_marker_key(slug: str, ip_hash: str) -> str:
    """Per-IP like dedup marker for an article."""
    _validate_key_component(slug, "slug")
    return f"{LIKE_PREFIX}{slug}{CACHE_KEY_SEP}{ip_hash}"


def namespace_pattern(prefix: str, suffix: str = "*") -> str:
    """SCAN match pattern inside a cache namespace (e.g. articles::slug_x*)."""
    return f"{prefix}{suffix}"


ALL_ARTICLES_PATTERN = namespace_pattern(ARTICLES_CACHE_PREFIX)
ALL_TAGS_PATTERN = namespace_pattern(TAGS_CACHE_PREFIX)
ALL_COMMENTS_PATTERN = namespace_pattern(COMMENTS_CACHE_PREFIX)
ALL_SEARCH_PATTERN = namespace_pattern(SEARCH_CACHE_PREFIX)
ALL_FEED_PATTERN = namespace_pattern(FEED_CACHE_PREFIX)
