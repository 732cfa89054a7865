"""Core constants: key-value store prefixes and shared literal values.

Single source of truth for key structure. The prefixes below are part of
the store's wire naming and are shared with other deployments reading the
same Redis, so they must not change.
"""

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Abuse-mitigation counters and markers (key = prefix + identity)
LOGIN_ATTEMPT_PREFIX = "login_attempt:"
LOCKOUT_PREFIX = "lockout:"
LOCKOUT_NOTIFIED_PREFIX = "lockout_notified:"
EMAIL_RATE_NAMESPACE = "email_rate"

# Interaction dedup markers: <prefix><slug>:<ip hash>
VIEW_PREFIX = "article_view:"
LIKE_PREFIX = "article_like:"
IP_HASH_LENGTH = 16

# Cached content namespaces (Spring-style "name::key" layout)
ARTICLES_CACHE_PREFIX = "articles::"
TAGS_CACHE_PREFIX = "tags::"
COMMENTS_CACHE_PREFIX = "comments::"
SEARCH_CACHE_PREFIX = "search::"
FEED_CACHE_PREFIX = "feed::"

# Sentinel returned by client IP resolution when nothing usable is found.
UNKNOWN_IP = "unknown"
