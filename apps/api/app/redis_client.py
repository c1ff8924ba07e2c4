from __future__ import annotations

from functools import lru_cache

from redis import Redis
from redis.connection import ConnectionPool

from app.core.config import settings


@lru_cache(maxsize=1)
def _pool() -> ConnectionPool:
    # short timeouts so the rate limiter fails open quickly when redis is down
    return ConnectionPool.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=0.5,
        socket_timeout=0.5,
    )


def get_redis() -> Redis:
    return Redis(connection_pool=_pool())
