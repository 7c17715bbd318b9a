"""
Client IP resolution for FastAPI requests.

The resolved IP is the client half of every rate-limit bucket key.
"""

from __future__ import annotations

from fastapi import Request

# Checked in priority order before falling back to the socket peer
PROXY_IP_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(request: Request) -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    Proxy headers are consulted first (``X-Forwarded-For`` contributes its
    first entry), then the direct connection address.

    Returns:
        The resolved client IP string, or ``""`` if none can be found.
    """
    for header in PROXY_IP_HEADERS:
        ip_value = request.headers.get(header)
        if ip_value:
            client_ip = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""
