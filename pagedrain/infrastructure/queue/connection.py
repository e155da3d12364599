"""Process-wide Redis connection used by the queue façade."""

import logging
from typing import Optional

from redis import Redis

from pagedrain.infrastructure.config.settings import get_redis_url

logger = logging.getLogger(__name__)

_connection: Optional[Redis] = None


def get_redis_connection() -> Redis:
    """Returns the shared Redis client, creating it from `redis.url` on first use.

    redis-py connects lazily, so this does not touch the network.
    """
    global _connection
    if _connection is None:
        url = get_redis_url()
        _connection = Redis.from_url(url)
        logger.info(f"Redis connection configured for {url}")
    return _connection


def reset_redis_connection() -> None:
    """Drops the shared client so the next call rebuilds it (tests, config reloads)."""
    global _connection
    if _connection is not None:
        _connection.close()
    _connection = None
