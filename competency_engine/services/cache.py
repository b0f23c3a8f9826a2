"""
Result Cache - Competency Assessment Engine
competency_engine/services/cache.py

Singleton Redis cache plus a read-through wrapper for completed results.
Results never change after completion, so entries are never invalidated
and only expire by TTL. Redis failures degrade to no caching.
"""
from typing import Callable, Optional

import redis
import structlog

from competency_engine.config import settings
from competency_engine.models.result import Result
from competency_engine.services.redis_cache import RedisCache

logger = structlog.get_logger(__name__)

# Singleton instance
_cache: Optional[RedisCache] = None


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    Returns:
        RedisCache instance if caching is enabled and Redis is reachable,
        None otherwise.
    """
    global _cache
    if not settings.CACHE_ENABLED:
        return None
    if _cache is None:
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError):
            logger.warning("redis_unavailable", url=settings.REDIS_URL)
            _cache = None
    return _cache


def reset_cache() -> None:
    """Reset the cache singleton."""
    global _cache
    _cache = None


def result_key(assessment_id: str) -> str:
    return f"result:{assessment_id}"


class ResultCache:
    """Read-through cache for completed assessment results."""

    def __init__(self, cache: Optional[RedisCache], ttl_seconds: int = settings.CACHE_TTL_RESULTS):
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    def get_or_load(self, assessment_id: str, loader: Callable[[], Optional[Result]]) -> Optional[Result]:
        key = result_key(assessment_id)
        if self.cache is not None:
            try:
                cached = self.cache.get(key, Result)
                if cached is not None:
                    logger.debug("result_cache_hit", assessment_id=assessment_id)
                    return cached
            except redis.RedisError as e:
                logger.warning("result_cache_read_failed", assessment_id=assessment_id, error=str(e))

        result = loader()
        if result is not None:
            self.put(result)
        return result

    def put(self, result: Result) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(result_key(result.assessment_id), result, self.ttl_seconds)
        except redis.RedisError as e:
            logger.warning("result_cache_write_failed", assessment_id=result.assessment_id, error=str(e))
