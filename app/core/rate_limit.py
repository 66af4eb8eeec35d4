# app/core/rate_limit.py
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    message = f"Rate limit exceeded: {exc.detail}"
    return JSONResponse(
        status_code=429,
        content={"success": False, "message": message, "error": message},
    )
