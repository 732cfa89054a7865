"""Client IP resolution behind reverse proxies, plus IP anonymization.

Proxy headers are only honoured when the direct peer is a trusted proxy.
Resolution order for a trusted peer:

1. X-Forwarded-For: walk right to left, first valid entry that is not
   itself a trusted proxy (the leftmost entries are client-controlled).
2. X-Real-IP, if valid.
3. The peer address.

Pure functions over a header mapping so they can be tested without a
request object.
"""

import re
from collections.abc import Iterable, Mapping

from app.core.constants import UNKNOWN_IP

# IPv4/IPv6 characters only; rejects header injection payloads.
_IP_PATTERN = re.compile(r"^[0-9a-fA-F.:]+$")
_MAX_IP_LENGTH = 45

DEFAULT_TRUSTED_PROXIES = frozenset({"127.0.0.1", "::1", "0:0:0:0:0:0:0:1"})

# Docker bridge and K3s pod/service ranges. Not all of RFC 1918.
TRUSTED_PREFIXES = (
    "172.17.",
    "172.18.",
    "172.19.",
    "172.20.",
    "10.42.",
    "10.43.",
)


def is_valid_ip(ip: str | None) -> bool:
    """Return True if ip looks like an IPv4/IPv6 literal of sane length."""
    return bool(ip) and len(ip) <= _MAX_IP_LENGTH and bool(_IP_PATTERN.match(ip))


def is_trusted_proxy(ip: str | None, trusted_proxies: Iterable[str] = DEFAULT_TRUSTED_PROXIES) -> bool:
    """Return True if ip is an explicitly trusted proxy or in a container range."""
    if not ip or not ip.strip():
        return False
    if ip in trusted_proxies:
        return True
    return ip.startswith(TRUSTED_PREFIXES)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


def extract_client_ip(
    headers: Mapping[str, str],
    remote_addr: str | None,
    trusted_proxies: Iterable[str] = DEFAULT_TRUSTED_PROXIES,
) -> str | None:
    """Resolve the originating client IP.

    Args:
        headers: Request headers (case-insensitive mapping or lowercase keys).
        remote_addr: Direct peer address, if known.
        trusted_proxies: Peers allowed to assert the client IP via headers.

    Returns:
        The client IP, or None when it cannot be determined.
    """
    trusted = frozenset(trusted_proxies)
    remote = remote_addr.strip() if remote_addr and remote_addr.strip() else None

    if not is_trusted_proxy(remote, trusted):
        return remote

    forwarded = _header(headers, "X-Forwarded-For")
    if forwarded and forwarded.strip():
        for candidate in reversed(forwarded.split(",")):
            ip = candidate.strip()
            if is_valid_ip(ip) and not is_trusted_proxy(ip, trusted):
                return ip

    real_ip = _header(headers, "X-Real-IP")
    if real_ip and real_ip.strip() and is_valid_ip(real_ip.strip()):
        return real_ip.strip()

    return remote


def client_ip_or_unknown(
    headers: Mapping[str, str],
    remote_addr: str | None,
    trusted_proxies: Iterable[str] = DEFAULT_TRUSTED_PROXIES,
) -> str:
    """extract_client_ip with the UNKNOWN_IP sentinel instead of None."""
    return extract_client_ip(headers, remote_addr, trusted_proxies) or UNKNOWN_IP


def anonymize_ip(ip: str | None) -> str:
    """Truncate an IP for logs and emails (IPv4 last octet, IPv6 to /64)."""
    if not ip or not ip.strip() or ip == UNKNOWN_IP:
        return UNKNOWN_IP
    if "." in ip and ":" not in ip:
        head, _, _ = ip.rpartition(".")
        if head:
            return f"{head}.0"
    if ":" in ip:
        parts = ip.split(":")
        if len(parts) >= 4:
            return ":".join(parts[:4]) + "::"
    return "anonymized"
