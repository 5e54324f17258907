"""Per-client request limits for endpoints that hit ProShop or the disk."""

from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

# A refresh pass walks every queued work order against ProShop
REFRESH_TRIGGER_LIMIT = "2/minute"
SNAPSHOT_SAVE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)


async def refresh_rate_limit_handler(request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Rate limit exceeded ({exc.detail}). Please try again later.",
            "error_code": "rate_limited",
        },
        headers={"Retry-After": "60"},
    )


def setup_rate_limiting(app):
    """Attach the shared limiter and its 429 handler to ``app``."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, refresh_rate_limit_handler)
    return limiter
