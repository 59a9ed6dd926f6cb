from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from openmusic.api.deps import get_songs_service
from openmusic.schemas import SongPayload
from openmusic.services.songs import SongsService

router = APIRouter(prefix="/songs", tags=["Songs"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_song(payload: SongPayload, songs: SongsService = Depends(get_songs_service)):
    song_id = await songs.add_song(
        title=payload.title,
        year=payload.year,
        genre=payload.genre,
        performer=payload.performer,
        duration=payload.duration,
        album_id=payload.albumId,
    )
    return {"status": "success", "data": {"songId": song_id}}


@router.get("")
async def get_songs(
    title: Optional[str] = Query(default=None),
    performer: Optional[str] = Query(default=None),
    songs: SongsService = Depends(get_songs_service),
):
    result = await songs.get_songs(title=title, performer=performer)
    return {"status": "success", "data": {"songs": result}}


@router.get("/{song_id}")
async def get_song(song_id: str, songs: SongsService = Depends(get_songs_service)):
    song = await songs.get_song(song_id)
    return {"status": "success", "data": {"song": song}}


@router.put("/{song_id}")
async def edit_song(
    song_id: str,
    payload: SongPayload,
    songs: SongsService = Depends(get_songs_service),
):
    await songs.edit_song(
        song_id,
        title=payload.title,
        year=payload.year,
        genre=payload.genre,
        performer=payload.performer,
        duration=payload.duration,
        album_id=payload.albumId,
    )
    return {"status": "success", "message": "Song updated"}


@router.delete("/{song_id}")
async def delete_song(song_id: str, songs: SongsService = Depends(get_songs_service)):
    await songs.delete_song(song_id)
    return {"status": "success", "message": "Song deleted"}
