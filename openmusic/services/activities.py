import logging
from datetime import datetime, timezone
from typing import Literal, Optional

from openmusic.database import Store, Transaction
from openmusic.models import generate_id
from openmusic.schemas import ActivityRecord

logger = logging.getLogger(__name__)

ACTIVITIES_TABLE = "playlist_song_activities"

ActivityAction = Literal["add", "delete"]


class ActivitiesService:
    """Append-only log of playlist membership changes."""

    def __init__(self, store: Store):
        self.store = store

    async def append(
        self,
        playlist_id: str,
        song_id: str,
        user_id: str,
        action: ActivityAction,
        tx: Optional[Transaction] = None,
    ) -> ActivityRecord:
        """
        Write one immutable record stamped with the server time. Pass tx to
        commit it together with the membership change it describes.
        """
        record = ActivityRecord(
            id=generate_id("activity"),
            playlist_id=playlist_id,
            song_id=song_id,
            user_id=user_id,
            action=action,
            time=datetime.now(timezone.utc),
        )
        await (tx or self.store).insert(ACTIVITIES_TABLE, record.model_dump())
        logger.info(f"Activity recorded: playlist_id={playlist_id}, song_id={song_id}, action={action}")
        return record

    async def list_activities(self, playlist_id: str) -> list[ActivityRecord]:
        """Records for a playlist, oldest first. Empty when nothing happened yet."""
        rows = await self.store.select(
            ACTIVITIES_TABLE,
            {"playlist_id": playlist_id},
            order_by=["time", "seq"],
        )
        return [ActivityRecord(**row) for row in rows]
