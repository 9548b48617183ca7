"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .booking_store import SqlAlchemyBookingStore
from .redis_client import get_redis, close_redis, RedisClient

__all__ = ['SqlAlchemyBookingStore', 'get_redis', 'close_redis', 'RedisClient']
