from typing import Protocol

import redis.asyncio as redis

from spotbook.app.core.config import settings


redis_client: redis.Redis | None = None


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...


async def init_redis() -> None:
    """Initialise a shared Redis connection."""
    global redis_client
    redis_client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis() -> None:
    """Close the Redis connection if it was initialised."""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None


class RedisStore:
    """Read-only view over the shared Redis connection used as local storage."""

    def __init__(self, client: redis.Redis | None = None) -> None:
        self._client = client

    async def get(self, key: str) -> str | None:
        client = self._client or redis_client
        if client is None:
            raise RuntimeError("Redis unavailable; call init_redis() first")
        value = await client.get(key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value


async def get_stored_user(store: KeyValueStore, key: str | None = None) -> str | None:
    """Return the stored user id, or None when nobody is logged in."""
    value = await store.get(settings.USER_STORAGE_KEY if key is None else key)
    return value or None
