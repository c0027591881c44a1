# backend/reservas/redis_client.py

from redis import Redis

from .config import settings

# None when REDIS_URL is not set: response caching is disabled
redis_client: Redis | None = (
    Redis.from_url(settings.redis_url, decode_responses=True)
    if settings.redis_url
    else None
)
