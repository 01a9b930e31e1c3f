from redis import Redis

from .config import settings

# None when Redis is not configured; event emission is skipped then
redis_client: Redis | None = (
    Redis.from_url(settings.redis_url, decode_responses=True)
    if settings.redis_url
    else None
)
