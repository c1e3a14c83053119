"""Request utility functions."""
from typing import Optional, Tuple
from fastapi import Request


def get_client_ip(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For when behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


def extract_client_metadata(request: Request) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract IP address and user agent from request.

    Returns:
        Tuple of (ip_address, user_agent)
    """
    return get_client_ip(request), request.headers.get("user-agent")
