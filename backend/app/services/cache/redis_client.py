"""
Redis cache client for daily price series.

Keyed by ticker, each entry holds the series plus the time it was fetched,
so repeat lookups skip the provider (which is heavily rate limited).
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional, Dict, Tuple

import redis.asyncio as redis
from pydantic import BaseModel, ValidationError

from app.core.config import settings
from app.schemas.market import PriceSeries

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None


async def init_redis() -> Optional[redis.Redis]:
    """
    Initialize Redis connection pool.
    Called on application startup.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    try:
        _redis_pool = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        # Test connection
        await _redis_pool.ping()
        logger.info(f"Redis connected: {settings.redis_url}")
        return _redis_pool
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory fallback.")
        _redis_pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.aclose()
        _redis_pool = None
        logger.info("Redis connection closed")


def get_redis() -> Optional[redis.Redis]:
    """Get the Redis connection pool."""
    return _redis_pool


class CachedSeries(BaseModel):
    """A price series with the time it was fetched from the provider."""

    symbol: str
    fetched_at: datetime
    series: PriceSeries


class SeriesCache:
    """
    Cache for daily price series.

    Keys:
    - series:{symbol} → JSON CachedSeries, expires after `ttl` seconds

    Falls back to an in-process dict with the same TTL when Redis is
    unavailable.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None, ttl: Optional[int] = None):
        self._redis = redis_client
        self.ttl = ttl if ttl is not None else settings.series_cache_ttl
        self._memory_cache: Dict[str, Tuple[str, float]] = {}

    @property
    def redis(self) -> Optional[redis.Redis]:
        return self._redis or _redis_pool

    @staticmethod
    def _key(symbol: str) -> str:
        return f"series:{symbol.upper()}"

    def _memory_get(self, key: str) -> Optional[str]:
        entry = self._memory_cache.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._memory_cache[key]
            return None
        return value

    def _memory_set(self, key: str, value: str, ex: int) -> None:
        now = time.monotonic()
        expired = [k for k, (_, expires_at) in self._memory_cache.items() if now >= expires_at]
        for k in expired:
            del self._memory_cache[k]
        self._memory_cache[key] = (value, now + ex)

    async def get(self, symbol: str) -> Optional[CachedSeries]:
        """Cached series for a symbol, None on miss or expiry."""
        key = self._key(symbol)
        value = None

        if self.redis:
            try:
                value = await self.redis.get(key)
            except Exception as e:
                logger.debug(f"Redis get failed for {key}: {e}")
                value = self._memory_get(key)
        else:
            value = self._memory_get(key)

        if not value:
            return None

        try:
            return CachedSeries.model_validate_json(value)
        except ValidationError as e:
            # Corrupt or written by an older schema
            logger.debug(f"Dropping unreadable cache entry {key}: {e}")
            await self.invalidate(symbol)
            return None

    async def set(
        self,
        symbol: str,
        series: PriceSeries,
        fetched_at: Optional[datetime] = None,
    ) -> CachedSeries:
        """Store a freshly fetched series."""
        entry = CachedSeries(
            symbol=symbol.upper(),
            fetched_at=fetched_at or datetime.now(timezone.utc),
            series=series,
        )
        key = self._key(symbol)
        value = entry.model_dump_json()

        if self.ttl <= 0:
            return entry

        if self.redis:
            try:
                await self.redis.set(key, value, ex=self.ttl)
                return entry
            except Exception as e:
                logger.debug(f"Redis set failed for {key}: {e}")

        # Fallback to memory
        self._memory_set(key, value, self.ttl)
        return entry

    async def invalidate(self, symbol: str) -> None:
        """Drop a cached series."""
        key = self._key(symbol)
        self._memory_cache.pop(key, None)
        if self.redis:
            try:
                await self.redis.delete(key)
            except Exception as e:
                logger.debug(f"Redis delete failed for {key}: {e}")


# Global cache instance
_series_cache: Optional[SeriesCache] = None


def get_series_cache() -> SeriesCache:
    """Get the global series cache instance."""
    global _series_cache
    if _series_cache is None:
        _series_cache = SeriesCache()
    return _series_cache
