from typing import Optional

from openmusic.database import Contains, Store
from openmusic.exceptions import ConstraintViolation, NotFoundError
from openmusic.models import generate_id


class SongsService:
    """Song catalogue."""

    def __init__(self, store: Store):
        self.store = store

    async def add_song(
        self,
        title: str,
        year: int,
        genre: str,
        performer: str,
        duration: Optional[int] = None,
        album_id: Optional[str] = None,
    ) -> str:
        song_id = generate_id("song")
        values = {
            "id": song_id,
            "title": title,
            "year": year,
            "genre": genre,
            "performer": performer,
            "duration": duration,
            "album_id": album_id,
        }
        try:
            await self.store.insert("songs", values)
        except ConstraintViolation as exc:
            raise NotFoundError("Album not found") from exc
        return song_id

    async def get_songs(self, title: Optional[str] = None, performer: Optional[str] = None) -> list[dict]:
        where = {}
        if title:
            where["title"] = Contains(title)
        if performer:
            where["performer"] = Contains(performer)
        rows = await self.store.select("songs", where, order_by=["title"])
        return [{"id": r["id"], "title": r["title"], "performer": r["performer"]} for r in rows]

    async def get_song(self, song_id: str) -> dict:
        rows = await self.store.select("songs", {"id": song_id})
        if not rows:
            raise NotFoundError("Song not found")
        song = rows[0]
        return {
            "id": song["id"],
            "title": song["title"],
            "year": song["year"],
            "performer": song["performer"],
            "genre": song["genre"],
            "duration": song["duration"],
            "albumId": song["album_id"],
        }

    async def edit_song(
        self,
        song_id: str,
        title: str,
        year: int,
        genre: str,
        performer: str,
        duration: Optional[int] = None,
        album_id: Optional[str] = None,
    ) -> None:
        values = {
            "title": title,
            "year": year,
            "genre": genre,
            "performer": performer,
            "duration": duration,
            "album_id": album_id,
        }
        try:
            updated = await self.store.update("songs", values, {"id": song_id})
        except ConstraintViolation as exc:
            raise NotFoundError("Album not found") from exc
        if updated == 0:
            raise NotFoundError("Failed to update song. Id not found")

    async def delete_song(self, song_id: str) -> None:
        deleted = await self.store.delete("songs", {"id": song_id})
        if deleted == 0:
            raise NotFoundError("Failed to delete song. Id not found")
