"""
Redis caching service for the caller's booking projection.

CACHING STRATEGY
================

What we cache:
  - The GET /booking response body per user, JSON-serialized
  - Cache key pattern: "{BOOKING_CACHE_PREFIX}:{user_id}" (default "booking:user:{user_id}")

Why:
  - GET /booking is polled by clients far more often than bookings change
  - A user has at most one booking, so one key per user covers every read

Invalidation strategy:
  - On create/replace: delete the caller's key
  - TTL-based expiry as safety net (REDIS_CACHE_TTL)

  Rooms are immutable for this service and only the owner mutates a booking,
  so the owner's own writes are the only invalidation events.

Why NOT cache occupancy:
  - Capacity decisions must see committed rows under the room lock; a cached
    count would reintroduce the overbooking race the locks remove.
"""

import json
from typing import Optional

from redis.exceptions import RedisError

from hotel_booking.core.config import get_settings
from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import record_cache_operation
from hotel_booking.infrastructure.redis_client import get_redis

logger = get_logger(__name__)


def _make_booking_key(user_id: int) -> str:
    return f"{get_settings().BOOKING_CACHE_PREFIX}:{user_id}"


async def get_cached_booking(user_id: int) -> Optional[dict]:
    """Retrieve the cached booking projection for a user."""
    client = await get_redis()
    if not client:
        return None

    key = _make_booking_key(user_id)
    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_booking(user_id: int, data: dict) -> None:
    """Cache a booking projection with TTL."""
    client = await get_redis()
    if not client:
        return

    settings = get_settings()
    key = _make_booking_key(user_id)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_booking_cache(user_id: int) -> None:
    """Drop the cached projection after the user's booking changed."""
    client = await get_redis()
    if not client:
        return

    key = _make_booking_key(user_id)
    try:
        deleted = await client.delete(key)
        logger.info("cache_invalidated", key=key, keys_deleted=deleted)
    except RedisError as e:
        logger.error("cache_invalidation_error", key=key, error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        keyspace = await client.info("keyspace")
        return {
            "status": "connected",
            "hits": info.get("keyspace_hits", 0),
            "misses": info.get("keyspace_misses", 0),
            "hit_rate": (
                round(
                    info.get("keyspace_hits", 0)
                    / max(info.get("keyspace_hits", 0) + info.get("keyspace_misses", 0), 1)
                    * 100,
                    2,
                )
            ),
            "keys": keyspace,
        }
    except RedisError as e:
        return {"status": "error", "error": str(e)}
