"""Request throttling for the GRH API (slowapi).

Throttled routes, each limit read from settings at request time:
- POST /auth/register: ``rate_limit_register``
- POST /auth/login: ``rate_limit_login``
- file uploads (CV profiles, mission reports, training material):
  ``rate_limit_upload``

Callers with a valid bearer token are counted per account, so employees
behind one company proxy do not share a bucket. Anonymous callers, and
every caller in local mode, are counted per client address.

Usage in routers:
    from grh.core.rate_limiting import limiter, setting_limit

    @router.post("/{mission_id}/report")
    @limiter.limit(setting_limit("rate_limit_upload"))
    async def submit_mission_report(request: Request, ...):
        ...
"""

import uuid
from collections.abc import Callable

import jwt
import structlog
from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from grh.core.auth import bearer_token, decode_jwt
from grh.core.config import settings

logger = structlog.get_logger()

DEFAULT_RETRY_AFTER_SECONDS = 60


def client_key(request: Request) -> str:
    """Bucket key: ``user:<uuid>`` for a verified token, else ``ip:<address>``.

    The token is only decoded for its subject; deps.py does the full check
    and rejects the request later when the account is unknown or inactive.
    """
    address = f"ip:{get_remote_address(request)}"
    if not settings.auth_enabled:
        return address

    token = bearer_token(request.headers.get("Authorization"))
    if not token:
        return address
    try:
        return f"user:{uuid.UUID(decode_jwt(token)['sub'])}"
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        return address


def setting_limit(name: str) -> Callable[[], str]:
    """Limit provider reading ``settings.<name>`` on every request."""

    def provider() -> str:
        return getattr(settings, name)

    return provider


# In-memory storage: one bucket set per process.
limiter = Limiter(key_func=client_key, enabled=settings.rate_limit_enabled)


def retry_after_seconds(exc: RateLimitExceeded) -> int:
    """Length of the exceeded window, e.g. 900 for ``5/15minute``."""
    try:
        return int(exc.limit.limit.get_expiry())
    except (AttributeError, TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 with the standard error envelope and a Retry-After header."""
    retry_after = retry_after_seconds(exc)
    logger.warning(
        "rate_limited",
        path=request.url.path,
        key=client_key(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMITED",
                "message": f"Too many requests ({exc.detail}). Retry in {retry_after}s.",
            },
        },
        headers={"Retry-After": str(retry_after)},
    )
