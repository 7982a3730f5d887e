# common/cache.py
import json
import os
from typing import Any, Optional

import redis

from common.logging_config import get_logger

logger = get_logger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """
    Return a Redis client if REDIS_URL is configured, otherwise None.
    Fails gracefully (no caching) if Redis is not reachable.
    """
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = os.getenv("REDIS_URL")
    if not redis_url:
        return None

    try:
        client = redis.from_url(redis_url, decode_responses=True)
        client.ping()
    except redis.RedisError as exc:
        logger.warning("redis_unavailable", redis_url=redis_url, error=str(exc))
        _redis_client = None
        return None

    _redis_client = client
    return _redis_client


def reset_redis_client() -> None:
    """Forget the memoized client so the next call re-reads REDIS_URL."""
    global _redis_client
    _redis_client = None


def get_cached_json(key: str) -> Optional[Any]:
    client = get_redis_client()
    if client is None:
        return None

    try:
        raw = client.get(key)
    except redis.RedisError as exc:
        logger.warning("cache_read_failed", key=key, error=str(exc))
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("cache_value_not_json", key=key)
        return None


def set_cached_json(key: str, value: Any, ttl_seconds: int = 60) -> None:
    client = get_redis_client()
    if client is None:
        return

    try:
        client.setex(key, ttl_seconds, json.dumps(value, default=str))
    except redis.RedisError as exc:
        logger.warning("cache_write_failed", key=key, error=str(exc))
