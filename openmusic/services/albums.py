import logging

from openmusic.database import Store
from openmusic.exceptions import NotFoundError
from openmusic.models import generate_id
from openmusic.services.album_likes import AlbumLikesService

logger = logging.getLogger(__name__)


class AlbumsService:
    """Album catalogue. Deleting an album also drops its cached like count."""

    def __init__(self, store: Store, likes: AlbumLikesService):
        self.store = store
        self.likes = likes

    async def add_album(self, name: str, year: int) -> str:
        album_id = generate_id("album")
        await self.store.insert("albums", {"id": album_id, "name": name, "year": year})
        return album_id

    async def get_album(self, album_id: str) -> dict:
        rows = await self.store.select("albums", {"id": album_id})
        if not rows:
            raise NotFoundError("Album not found")
        album = rows[0]

        songs = await self.store.select("songs", {"album_id": album_id}, order_by=["title"])
        return {
            "id": album["id"],
            "name": album["name"],
            "year": album["year"],
            "coverUrl": album.get("cover_url"),
            "songs": [{"id": s["id"], "title": s["title"], "performer": s["performer"]} for s in songs],
        }

    async def ensure_album_exists(self, album_id: str) -> None:
        if not await self.store.count("albums", {"id": album_id}):
            raise NotFoundError("Album not found")

    async def edit_album(self, album_id: str, name: str, year: int) -> None:
        updated = await self.store.update("albums", {"name": name, "year": year}, {"id": album_id})
        if updated == 0:
            raise NotFoundError("Failed to update album. Id not found")

    async def delete_album(self, album_id: str) -> None:
        deleted = await self.store.delete("albums", {"id": album_id})
        if deleted == 0:
            raise NotFoundError("Failed to delete album. Id not found")
        # Likes cascade with the album
        await self.likes.invalidate_count(album_id)
        logger.info(f"Album deleted: album_id={album_id}")
