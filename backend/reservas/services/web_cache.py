"""Short-lived cache for availability responses.

Key format: availability:{slug}:{date}:{party}
A cached response may be up to ttl seconds stale; the booking gate always
re-reads the calendar, so staleness only affects what is shown.
"""

import json
import logging

from redis import Redis
from redis.exceptions import RedisError

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)

_AVAILABILITY_KEY_PREFIX = "availability"


def availability_key(slug: str, date_str: str, party: int) -> str:
    return f"{_AVAILABILITY_KEY_PREFIX}:{slug}:{date_str}:{party}"


class ResponseCache:
    """JSON values in Redis with a fixed TTL. Redis failures count as a miss."""

    def __init__(self, redis: Redis, ttl_seconds: int):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def get(self, key: str) -> dict | None:
        try:
            raw = self.redis.get(key)
        except RedisError:
            logger.exception("Failed to read cache key=%s", key)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Dropping unreadable cache entry: {key}")
            return None

    def set(self, key: str, value: dict) -> None:
        try:
            self.redis.setex(key, self.ttl_seconds, json.dumps(value))
        except RedisError:
            logger.exception("Failed to write cache key=%s", key)

    def invalidate_restaurant(self, slug: str) -> int:
        """Drop every cached availability response of a restaurant."""
        try:
            keys = list(self.redis.scan_iter(f"{_AVAILABILITY_KEY_PREFIX}:{slug}:*"))
            if not keys:
                return 0
            return self.redis.delete(*keys)
        except RedisError:
            logger.exception("Failed to invalidate cache for restaurant=%s", slug)
            return 0


def get_response_cache() -> ResponseCache | None:
    """Cache dependency; None when TTL is 0 or Redis is not configured."""
    if settings.cache_ttl_seconds <= 0 or redis_client is None:
        return None
    return ResponseCache(redis_client, settings.cache_ttl_seconds)
