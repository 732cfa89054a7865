"""Infrastructure: key-value store, persistence, security, external services."""
