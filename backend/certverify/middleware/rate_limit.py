"""
Rate limiting using slowapi.

Every endpoint shares a per-IP default budget. Authentication endpoints carry
a stricter limit through the `auth_rate_limit` decorator. Limits are kept in
process memory.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from certverify.api.utils.request import get_client_ip
from certverify.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def client_key(request: Request) -> str:
    """Rate limit key: the client IP, honouring X-Forwarded-For."""
    return get_client_ip(request) or "unknown"


limiter = Limiter(
    key_func=client_key,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


def auth_rate_limit():
    """Stricter limit for login and token endpoints."""
    return limiter.limit(settings.RATE_LIMIT_AUTH)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a JSON 429 when a client exceeds its budget."""
    logger.warning("Rate limit exceeded for %s on %s: %s", client_key(request), request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too Many Requests",
            "message": "Too many requests from this IP, please try again later.",
            "detail": str(exc.detail),
        },
    )
