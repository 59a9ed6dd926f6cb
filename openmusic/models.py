from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Integer, String, Text, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from openmusic.database import Base


def generate_id(prefix: str) -> str:
    """Generate a prefixed identifier, e.g. ``album-3f9c0d1e2a4b5c6d``."""
    return f"{prefix}-{uuid.uuid4().hex[:16]}"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    fullname: Mapped[str] = mapped_column(Text, nullable=False)


class Album(Base):
    __tablename__ = "albums"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    cover_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Song(Base):
    __tablename__ = "songs"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    genre: Mapped[str] = mapped_column(Text, nullable=False)
    performer: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    album_id: Mapped[Optional[str]] = mapped_column(
        String(50), ForeignKey("albums.id", ondelete="SET NULL"), nullable=True
    )


class Playlist(Base):
    __tablename__ = "playlists"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    owner: Mapped[str] = mapped_column(
        String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )


class PlaylistSong(Base):
    """Song-in-playlist edge, unique per (playlist, song)."""

    __tablename__ = "playlist_songs"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    playlist_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("playlists.id", ondelete="CASCADE", name="fk_playlist_songs_playlist"),
        nullable=False,
    )
    song_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("songs.id", ondelete="CASCADE", name="fk_playlist_songs_song"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("playlist_id", "song_id", name="uq_playlist_songs_playlist_song"),
    )


class PlaylistSongActivity(Base):
    """Append-only record of playlist membership changes."""

    __tablename__ = "playlist_song_activities"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    playlist_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False
    )
    song_id: Mapped[str] = mapped_column(String(50), nullable=False)
    user_id: Mapped[str] = mapped_column(String(50), nullable=False)
    action: Mapped[str] = mapped_column(String(16), nullable=False)
    time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Insertion order; breaks ties between equal timestamps
    seq: Mapped[int] = mapped_column(BigInteger, Identity(), nullable=False)

    __table_args__ = (
        Index("idx_playlist_song_activities_playlist_time", "playlist_id", "time", "seq"),
    )


class UserAlbumLike(Base):
    """User-album like relationship; the unique constraint is the conflict authority."""

    __tablename__ = "user_album_likes"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    album_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("albums.id", ondelete="CASCADE", name="fk_user_album_likes_album"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "album_id", name="uq_user_album_likes_user_album"),
        Index("idx_user_album_likes_album", "album_id"),
    )
