"""Time bounded memoization of aggregate price results."""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis

from pricecompare.repositories.redis.redis_crud import RedisDatabase

from .models import AggregateResult

logger = logging.getLogger("price_search.cache")

DEFAULT_TTL_SECONDS = 60 * 60


class CacheBackend(ABC):
    """Storage for cache entries with an absolute expiry."""

    @abstractmethod
    def get(self, key: str) -> Optional[AggregateResult]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: AggregateResult, ttl_seconds: int) -> None:
        raise NotImplementedError


class InMemoryCacheBackend(CacheBackend):
    """Process wide dictionary store; expired entries are evicted on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._entries: Dict[str, Tuple[AggregateResult, float]] = {}

    def get(self, key: str) -> Optional[AggregateResult]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: AggregateResult, ttl_seconds: int) -> None:
        self._entries[key] = (value, self.clock() + ttl_seconds)


class RedisCacheBackend(CacheBackend):
    """Share cached results between workers through Redis key expiry."""

    def __init__(self, redis_repository: RedisDatabase) -> None:
        self.redis_repository = redis_repository

    def get(self, key: str) -> Optional[AggregateResult]:
        try:
            raw = self.redis_repository.get(key)
        except redis.RedisError as exc:
            logger.warning("Redis read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return AggregateResult.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None

    def set(self, key: str, value: AggregateResult, ttl_seconds: int) -> None:
        try:
            self.redis_repository.set(key, json.dumps(value.as_dict()), ttl_seconds)
        except redis.RedisError as exc:
            logger.warning("Redis write failed for %s: %s", key, exc)


class ResultCache:
    """Cache of aggregates keyed by the literal query string.

    Construct once per process and hand it to the service. Entries expire on
    their own, so there is no teardown. Empty aggregates are never stored so a
    failed cycle can be retried right away.
    """

    KEY_PREFIX = "prices:"

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self.backend = backend if backend is not None else InMemoryCacheBackend()
        self.ttl_seconds = ttl_seconds

    @classmethod
    def key_for(cls, query: str) -> str:
        return f"{cls.KEY_PREFIX}{query}"

    def get(self, query: str) -> Optional[AggregateResult]:
        return self.backend.get(self.key_for(query))

    def set(self, query: str, result: AggregateResult) -> bool:
        """Store result for query; returns False when it was not cacheable."""
        if not result.quotes:
            logger.debug("Not caching empty result for '%s'", query)
            return False
        self.backend.set(self.key_for(query), result, self.ttl_seconds)
        return True


def create_result_cache(
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    redis_host: Optional[str] = None,
    redis_port: int = 6379,
    redis_password: Optional[str] = None,
    redis_ssl: bool = False,
) -> ResultCache:
    """Build the cache, backed by Redis when a host is configured."""
    if redis_host:
        logger.info("Using Redis result cache at %s:%d", redis_host, redis_port)
        repository = RedisDatabase(redis_host, redis_port, redis_password, redis_ssl)
        return ResultCache(RedisCacheBackend(repository), ttl_seconds)
    return ResultCache(InMemoryCacheBackend(), ttl_seconds)
