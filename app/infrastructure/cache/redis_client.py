# app/infrastructure/cache/redis_client.py

import redis.asyncio as redis

from app.core.config import settings

redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    global redis_client
    if redis_client is None:
        redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.SETTINGS_FETCH_TIMEOUT_SECONDS,
        )
    return redis_client


async def close_redis_client() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
