import logging
from typing import Optional

from openmusic.database import Store
from openmusic.exceptions import (
    AuthorizationError,
    ConflictError,
    ConstraintViolation,
    NotFoundError,
    StoreFailure,
)
from openmusic.models import generate_id
from openmusic.services.activities import ActivitiesService

logger = logging.getLogger(__name__)

PLAYLIST_SONG_SONG_FK = "fk_playlist_songs_song"


class PlaylistsService:
    """Playlists, their songs, and the owner check guarding every mutation."""

    def __init__(self, store: Store, activities: ActivitiesService):
        self.store = store
        self.activities = activities

    # ----- Ownership -----

    async def verify_playlist_owner(self, playlist_id: str, user_id: str) -> None:
        """
        Raise NotFoundError if the playlist does not exist, AuthorizationError
        if it belongs to someone else. Always reads the store; ownership is
        never cached.
        """
        rows = await self.store.select("playlists", {"id": playlist_id})
        if not rows:
            raise NotFoundError("Playlist not found")
        if rows[0]["owner"] != user_id:
            raise AuthorizationError("You are not allowed to access this playlist")

    # ----- Playlists -----

    async def add_playlist(self, name: str, owner: str) -> str:
        playlist_id = generate_id("playlist")
        try:
            await self.store.insert("playlists", {"id": playlist_id, "name": name, "owner": owner})
        except ConstraintViolation as exc:
            raise NotFoundError("Owner not found") from exc
        logger.info(f"Playlist created: playlist_id={playlist_id}, owner={owner}")
        return playlist_id

    async def get_playlists(self, owner: str) -> list[dict]:
        playlists = await self.store.select("playlists", {"owner": owner}, order_by=["name"])
        username = await self._username(owner)
        return [{"id": p["id"], "name": p["name"], "username": username} for p in playlists]

    async def delete_playlist(self, playlist_id: str, user_id: str) -> None:
        """
        Delete a playlist owned by user_id. The owner predicate is part of the
        DELETE itself; the gate only runs to explain a zero-row result.
        """
        deleted = await self.store.delete("playlists", {"id": playlist_id, "owner": user_id})
        if deleted == 0:
            await self.verify_playlist_owner(playlist_id, user_id)
            # Owner matched on re-read but nothing was deleted: removed concurrently.
            raise NotFoundError("Playlist not found")
        logger.info(f"Playlist deleted: playlist_id={playlist_id}")

    # ----- Playlist songs -----

    async def add_playlist_song(self, playlist_id: str, song_id: str, user_id: str) -> str:
        await self.verify_playlist_owner(playlist_id, user_id)

        if not await self.store.count("songs", {"id": song_id}):
            raise NotFoundError("Song not found")

        playlist_song_id = generate_id("playlist-song")
        try:
            async with self.store.transaction() as tx:
                await tx.insert(
                    "playlist_songs",
                    {"id": playlist_song_id, "playlist_id": playlist_id, "song_id": song_id},
                )
                await self.activities.append(playlist_id, song_id, user_id, "add", tx=tx)
        except ConstraintViolation as exc:
            if exc.is_unique:
                raise ConflictError("Song is already in the playlist") from exc
            if exc.is_foreign_key:
                if exc.constraint == PLAYLIST_SONG_SONG_FK:
                    raise NotFoundError("Song not found") from exc
                raise NotFoundError("Playlist not found") from exc
            raise StoreFailure(str(exc)) from exc
        return playlist_song_id

    async def get_playlist_songs(self, playlist_id: str, user_id: str) -> dict:
        await self.verify_playlist_owner(playlist_id, user_id)

        playlist = await self._get_playlist(playlist_id)
        edges = await self.store.select("playlist_songs", {"playlist_id": playlist_id})
        songs = []
        if edges:
            song_ids = [edge["song_id"] for edge in edges]
            rows = await self.store.select("songs", {"id": song_ids}, order_by=["title"])
            songs = [{"id": s["id"], "title": s["title"], "performer": s["performer"]} for s in rows]

        return {
            "id": playlist["id"],
            "name": playlist["name"],
            "username": await self._username(playlist["owner"]),
            "songs": songs,
        }

    async def delete_playlist_song(self, playlist_id: str, song_id: str, user_id: str) -> None:
        # Membership rows carry no owner column, so this stays check-then-act.
        await self.verify_playlist_owner(playlist_id, user_id)

        async with self.store.transaction() as tx:
            deleted = await tx.delete(
                "playlist_songs",
                {"playlist_id": playlist_id, "song_id": song_id},
            )
            if deleted == 0:
                raise NotFoundError("Song is not in the playlist")
            await self.activities.append(playlist_id, song_id, user_id, "delete", tx=tx)

    async def get_playlist_activities(self, playlist_id: str, user_id: str) -> list[dict]:
        """Activity log entries enriched with username and song title."""
        await self.verify_playlist_owner(playlist_id, user_id)

        records = await self.activities.list_activities(playlist_id)
        if not records:
            return []

        users = await self.store.select("users", {"id": {r.user_id for r in records}})
        songs = await self.store.select("songs", {"id": {r.song_id for r in records}})
        usernames = {u["id"]: u["username"] for u in users}
        titles = {s["id"]: s["title"] for s in songs}

        return [
            {
                "username": usernames.get(r.user_id, r.user_id),
                "title": titles.get(r.song_id, r.song_id),
                "action": r.action,
                "time": r.time,
            }
            for r in records
        ]

    # ----- Helpers -----

    async def _get_playlist(self, playlist_id: str) -> dict:
        rows = await self.store.select("playlists", {"id": playlist_id})
        if not rows:
            raise NotFoundError("Playlist not found")
        return rows[0]

    async def _username(self, user_id: str) -> Optional[str]:
        rows = await self.store.select("users", {"id": user_id})
        return rows[0]["username"] if rows else None
