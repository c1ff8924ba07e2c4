from __future__ import annotations

import time
from functools import lru_cache

import structlog
from fastapi import Request
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from app.core.config import settings
from app.redis_client import get_redis

logger = structlog.get_logger(__name__)

_WINDOWS = {
    "sec": 1,
    "second": 1,
    "seconds": 1,
    "min": 60,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


@lru_cache
def parse_rate(rate: str) -> tuple[int, int]:
    """Parse ``"<limit>/<window>"`` (e.g. ``"60/minute"``) into (limit, window_seconds)."""
    raw = rate.strip().lower()
    if "/" not in raw:
        raise ValueError(f"Invalid rate format: {rate}")

    limit_str, window_str = raw.split("/", 1)
    window = _WINDOWS.get(window_str.strip())
    if window is None:
        raise ValueError(f"Invalid rate window: {window_str}")
    return int(limit_str), window


def rate_for_path(path: str) -> tuple[str, str]:
    """Return (bucket name, rate) for a request path."""
    if any(path.startswith(prefix) for prefix in settings.rate_limit_strict_prefixes):
        return "strict", settings.rate_limit_strict
    return "default", settings.rate_limit_default


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window per-client limit kept in Redis. Fails open."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.rate_limit_enabled or request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if path in settings.rate_limit_exempt_paths:
            return await call_next(request)

        bucket_name, rate = rate_for_path(path)
        try:
            limit, window_seconds = parse_rate(rate)
        except ValueError:
            logger.warning("rate_limit_misconfigured", rate=rate)
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = int(time.time())
        window = now // window_seconds
        # strict routes share one counter per client; the rest count per route
        scope = bucket_name if bucket_name == "strict" else f"{request.method}:{path}"
        key = f"rl:{client_ip}:{scope}:{window_seconds}:{window}"

        try:
            pipe = get_redis().pipeline()
            pipe.incr(key)
            pipe.expire(key, window_seconds)
            count = int(pipe.execute()[0])
        except RedisError:
            logger.warning("rate_limit_backend_unavailable")
            return await call_next(request)

        reset = (window + 1) * window_seconds
        if count > limit:
            logger.info("rate_limited", client_ip=client_ip, path=path, bucket=bucket_name)
            return JSONResponse(
                status_code=429,
                content={"detail": {"code": "RATE_LIMITED", "message": "rate limit exceeded"}},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                    "Retry-After": str(max(0, reset - now)),
                },
            )

        response = await call_next(request)
        response.headers.setdefault("X-RateLimit-Limit", str(limit))
        response.headers.setdefault("X-RateLimit-Remaining", str(max(0, limit - count)))
        response.headers.setdefault("X-RateLimit-Reset", str(reset))
        return response
