"""
Redis caching layer.

Usage:
    from core.cache import redis_cache

    await redis_cache.init()
    questions = await redis_cache.get("questionnaire:questions")
"""

import json
import logging
from typing import Any, Optional
from datetime import datetime, date

from redis.asyncio import Redis, from_url
from core.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """JSON values in Redis. Reads and writes fail open: errors are logged."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.redis_url
        self._redis: Optional[Redis] = None

    async def init(self):
        """Initialize Redis connection."""
        if not self._redis:
            self._redis = from_url(
                str(self.url),
                encoding="utf-8",
                decode_responses=True
            )
            logger.info("Redis cache initialized")

    async def close(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis cache closed")

    @property
    def redis(self) -> Redis:
        if not self._redis:
            raise RuntimeError("Redis cache not initialized. Call init() first.")
        return self._redis

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        try:
            val = await self.redis.get(key)
            if val:
                return json.loads(val)
        except Exception as e:
            logger.error(f"Cache get error for {key}: {e}")
        return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache."""
        try:
            serialized = json.dumps(value, default=self._json_serializer)
            await self.redis.set(key, serialized, ex=ttl)
            return True
        except Exception as e:
            logger.error(f"Cache set error for {key}: {e}")
            return False

    @staticmethod
    def _json_serializer(obj):
        """JSON serializer for datetime objects."""
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        raise TypeError(f"Type {type(obj)} not serializable")


# Global instance
redis_cache = RedisCache()
