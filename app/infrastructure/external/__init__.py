"""External integrations (outbound email)."""
