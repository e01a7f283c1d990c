"""
Cache module for StockSight.

Caches provider price series per ticker in Redis.
"""

from app.services.cache.redis_client import (
    CachedSeries,
    SeriesCache,
    get_series_cache,
    init_redis,
    close_redis,
)

__all__ = [
    "CachedSeries",
    "SeriesCache",
    "get_series_cache",
    "init_redis",
    "close_redis",
]
