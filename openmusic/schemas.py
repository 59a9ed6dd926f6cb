from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ----- Album Schemas -----
class AlbumPayload(BaseModel):
    name: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)


# ----- Song Schemas -----
class SongPayload(BaseModel):
    title: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    genre: str = Field(..., min_length=1)
    performer: str = Field(..., min_length=1)
    duration: Optional[int] = Field(None, ge=0)
    albumId: Optional[str] = None


# ----- Playlist Schemas -----
class PlaylistPayload(BaseModel):
    name: str = Field(..., min_length=1)


class PlaylistSongPayload(BaseModel):
    songId: str = Field(..., min_length=1)


# ----- Activity Log -----
class ActivityRecord(BaseModel):
    """One immutable playlist activity entry."""
    id: str
    playlist_id: str
    song_id: str
    user_id: str
    action: Literal["add", "delete"]
    time: datetime


# ----- Token Schemas -----
class TokenPayload(BaseModel):
    sub: str  # user_id
    exp: Optional[datetime] = None


# ----- Health -----
class HealthResponse(BaseModel):
    status: str
    database: str
    redis: str
