import logging
from dataclasses import dataclass
from typing import Literal, Optional

from openmusic.cache import Cache, CacheStatus
from openmusic.database import Store
from openmusic.exceptions import (
    CacheTransportFailure,
    ConflictError,
    ConstraintViolation,
    NotFoundError,
    StoreFailure,
)
from openmusic.models import generate_id

logger = logging.getLogger(__name__)

LIKES_TABLE = "user_album_likes"
LIKES_ALBUM_FK = "fk_user_album_likes_album"


@dataclass(frozen=True)
class LikeCount:
    count: int
    source: Literal["cache", "computed"]

    @property
    def from_cache(self) -> bool:
        return self.source == "cache"


class AlbumLikesService:
    """Album like toggle with a cache-aside like counter.

    Reads populate the cache lazily, writes invalidate it. Duplicate likes
    are detected by the store's unique constraint, never by a prior read.
    """

    def __init__(self, store: Store, cache: Cache, cache_ttl: int):
        self.store = store
        self.cache = cache
        self.cache_ttl = cache_ttl

    def _count_key(self, album_id: str) -> str:
        return f"album-likes:{album_id}"

    async def add_like(self, user_id: str, album_id: str) -> str:
        """Like an album. Returns the new like id."""
        like_id = generate_id("like")
        try:
            await self.store.insert(
                LIKES_TABLE,
                {"id": like_id, "user_id": user_id, "album_id": album_id},
            )
        except ConstraintViolation as exc:
            if exc.is_unique:
                raise ConflictError("Album already liked by this user") from exc
            if exc.is_foreign_key:
                if exc.constraint == LIKES_ALBUM_FK:
                    raise NotFoundError("Album not found") from exc
                raise NotFoundError("User not found") from exc
            raise StoreFailure(str(exc)) from exc

        await self.invalidate_count(album_id)
        logger.info(f"Like added: user_id={user_id}, album_id={album_id}")
        return like_id

    async def remove_like(self, user_id: str, album_id: str) -> None:
        """Unlike an album."""
        deleted = await self.store.delete(
            LIKES_TABLE,
            {"user_id": user_id, "album_id": album_id},
        )
        if deleted == 0:
            raise NotFoundError("Album has not been liked by this user")

        await self.invalidate_count(album_id)
        logger.info(f"Like removed: user_id={user_id}, album_id={album_id}")

    async def has_liked(self, user_id: str, album_id: str) -> bool:
        count = await self.store.count(LIKES_TABLE, {"user_id": user_id, "album_id": album_id})
        return count > 0

    async def get_like_count(self, album_id: str, fallback_to_store: bool = False) -> LikeCount:
        """
        Get the like count for an album, cache first.

        A transport failure on the cache raises CacheTransportFailure unless
        fallback_to_store is set, in which case the count comes straight from
        the store and is not written back.
        """
        key = self._count_key(album_id)
        lookup = await self.cache.get(key)

        if lookup.status is CacheStatus.HIT:
            cached = self._parse_count(lookup.value)
            if cached is not None:
                logger.debug(f"Like count cache hit: album_id={album_id}")
                return LikeCount(count=cached, source="cache")
            logger.warning(f"Discarding malformed cached like count for {album_id}: {lookup.value!r}")

        if lookup.status is CacheStatus.UNAVAILABLE:
            if not fallback_to_store:
                raise CacheTransportFailure(cause=lookup.error)
            count = await self._count_from_store(album_id)
            return LikeCount(count=count, source="computed")

        logger.debug(f"Like count cache miss: album_id={album_id}")
        count = await self._count_from_store(album_id)
        try:
            await self.cache.set(key, str(count), self.cache_ttl)
        except CacheTransportFailure as exc:
            logger.warning(f"Could not cache like count for {album_id}: {exc}")
        return LikeCount(count=count, source="computed")

    async def invalidate_count(self, album_id: str) -> None:
        """Drop the cached count. A failure leaves the entry to expire on its TTL."""
        try:
            await self.cache.delete(self._count_key(album_id))
        except CacheTransportFailure as exc:
            logger.warning(f"Like count invalidation failed for {album_id}: {exc}")

    async def _count_from_store(self, album_id: str) -> int:
        return await self.store.count(LIKES_TABLE, {"album_id": album_id})

    @staticmethod
    def _parse_count(value: Optional[str]) -> Optional[int]:
        try:
            count = int(value)
        except (TypeError, ValueError):
            return None
        return count if count >= 0 else None
