"""
Rate Limiting for the Hostel Management API
===========================================
Implements rate limiting using slowapi (in-memory storage by default,
any limits storage URI via RATE_LIMIT_STORAGE_URI).

Unauthenticated write endpoints are the ones worth protecting:
- /api/auth/login: 5 req/min (brute force protection)
- /api/auth/register: 3 req/min
- /api/registration/submit: 10 req/min
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """
    Rate limit key.

    Authenticated callers (user id stashed on request.state by the auth
    dependency) are keyed by account, everyone else by IP address.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


LOGIN_LIMIT = "5/minute"
REGISTER_LIMIT = "3/minute"
SUBMIT_LIMIT = "10/minute"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Return the uniform envelope with a Retry-After header"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}",
        extra={"event_type": "rate_limit", "http_path": request.url.path}
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests. Please try again later.",
        },
        headers={"Retry-After": "60"}
    )


def auth_rate_limit():
    """Rate limit for login (5/min)"""
    return limiter.limit(LOGIN_LIMIT)


def strict_rate_limit():
    """Very strict rate limit for account creation (3/min)"""
    return limiter.limit(REGISTER_LIMIT)


def submission_rate_limit():
    """Rate limit for registration submissions (10/min)"""
    return limiter.limit(SUBMIT_LIMIT)
