import enum
import logging
from dataclasses import dataclass
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from openmusic.exceptions import CacheTransportFailure

logger = logging.getLogger(__name__)


class CacheStatus(enum.Enum):
    HIT = "hit"
    ABSENT = "absent"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheLookup:
    """Result of a cache read: a hit with its value, a logical miss, or a transport failure."""

    status: CacheStatus
    value: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT


class Cache:
    """Redis-backed key-value cache.

    Reads never raise: a missing key and an unreachable server come back as
    distinct :class:`CacheLookup` statuses. Writes raise
    :class:`CacheTransportFailure` so callers can decide whether it matters.
    """

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.redis: Optional[redis.Redis] = client

    async def connect(self) -> None:
        """Initialize Redis connection"""
        if self.redis is None:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )

    async def close(self) -> None:
        """Close Redis connection"""
        if self.redis is not None:
            await self.redis.close()
            self.redis = None

    async def ping(self) -> bool:
        if self.redis is None:
            return False
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False

    async def get(self, key: str) -> CacheLookup:
        if self.redis is None:
            return CacheLookup(CacheStatus.UNAVAILABLE, error=CacheTransportFailure("Cache not connected"))
        try:
            value = await self.redis.get(key)
        except RedisError as exc:
            logger.warning(f"Cache read failed for {key}: {exc}")
            return CacheLookup(CacheStatus.UNAVAILABLE, error=exc)
        if value is None:
            return CacheLookup(CacheStatus.ABSENT)
        return CacheLookup(CacheStatus.HIT, value=value)

    async def set(self, key: str, value: str, ttl: int) -> None:
        client = self._client()
        try:
            await client.setex(key, ttl, value)
        except RedisError as exc:
            raise CacheTransportFailure(f"Cache write failed for {key}", cause=exc) from exc

    async def delete(self, key: str) -> None:
        client = self._client()
        try:
            await client.delete(key)
        except RedisError as exc:
            raise CacheTransportFailure(f"Cache delete failed for {key}", cause=exc) from exc

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise CacheTransportFailure("Cache not connected")
        return self.redis
