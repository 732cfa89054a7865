"""Shared utilities: datetime, generators, hashing, client IP, sanitization."""

from app.shared.utils.client_ip import (
    anonymize_ip,
    client_ip_or_unknown,
    extract_client_ip,
    is_valid_ip,
)
from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.digest import sha256_hex
from app.shared.utils.generators import generate_cuid, generate_opaque_token
from app.shared.utils.sanitization import strip_html

__all__ = [
    "anonymize_ip",
    "client_ip_or_unknown",
    "ensure_utc",
    "extract_client_ip",
    "generate_cuid",
    "generate_opaque_token",
    "is_valid_ip",
    "sha256_hex",
    "strip_html",
    "utc_now",
]
