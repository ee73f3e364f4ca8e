"""
Redis cache access for the active events listing.

CACHING STRATEGY
================

What we cache:
  - "activeEvents": the open events, paged, JSON-serialized
  - "activeEventsPages": the page count derived from the listing

Both keys expire after ACTIVE_EVENTS_CACHE_TTL seconds (30 by default).

Invalidation:
  - The cache is NOT write-through. Creating, cancelling or accepting into
    an event leaves the cached listing alone; readers may see it stale for
    up to the TTL.
  - The lifecycle sweeper deletes "activeEvents" when it closes events.
    "activeEventsPages" is left to expire on its own.

Failures talking to Redis are logged and re-raised; the caller's request
fails rather than silently serving from the database.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from campus_events.core.config import get_settings
from campus_events.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        try:
            await client.ping()
        except RedisError as e:
            logger.error("redis_connection_failed", url=settings.REDIS_URL, error=str(e))
            await client.aclose()
            raise
        logger.info("redis_connected", url=settings.REDIS_URL)
        _redis_client = client

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


async def cache_get(key: str) -> Optional[str]:
    client = await get_redis()
    if not client:
        return None

    try:
        return await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        raise


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Store a value that expires after `ttl` seconds."""
    client = await get_redis()
    if not client:
        return

    try:
        await client.set(key, value, ex=ttl)
        logger.debug("cache_set", key=key, ttl=ttl)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))
        raise


async def cache_delete(key: str) -> int:
    """Delete a key. Returns the number of keys removed."""
    client = await get_redis()
    if not client:
        return 0

    try:
        deleted = await client.delete(key)
        logger.info("cache_invalidated", key=key, keys_deleted=deleted)
        return deleted
    except RedisError as e:
        logger.error("cache_delete_error", key=key, error=str(e))
        raise


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    if not settings.REDIS_ENABLED:
        return {"status": "disabled"}

    try:
        client = await get_redis()
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except RedisError as e:
        return {"status": "error", "error": str(e)}
