"""
Client IP and header helpers for FastAPI requests.

The verification gate forwards the client IP to the Private Access Token
relay (``clientIp``), so it must be the originating address rather than the
address of the nearest proxy.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

# Checked in order; the first non-empty value wins
PROXY_IP_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
    "X-Client-IP",
)


def get_client_ip(request: Request) -> Optional[str]:
    """Extract the real client IP from a FastAPI ``Request``.

    Proxy headers are checked in ``PROXY_IP_HEADERS`` order; for
    ``X-Forwarded-For`` the first (left-most) address is used. Falls back to
    the direct connection address.

    Returns:
        The resolved client IP, or ``None`` if none can be found.
    """
    for header in PROXY_IP_HEADERS:
        ip_value = request.headers.get(header)
        if ip_value:
            client_ip = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else None


def first_non_empty(*values: object) -> Optional[str]:
    """Return the first argument that is a non-blank string, trimmed."""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
