from fastapi import APIRouter, Depends, status

from openmusic.api.deps import get_current_user_id, get_playlists_service
from openmusic.schemas import PlaylistPayload, PlaylistSongPayload
from openmusic.services.playlists import PlaylistsService

router = APIRouter(prefix="/playlists", tags=["Playlists"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_playlist(
    payload: PlaylistPayload,
    user_id: str = Depends(get_current_user_id),
    playlists: PlaylistsService = Depends(get_playlists_service),
):
    playlist_id = await playlists.add_playlist(payload.name, owner=user_id)
    return {"status": "success", "data": {"playlistId": playlist_id}}


@router.get("")
async def get_playlists(
    user_id: str = Depends(get_current_user_id),
    playlists: PlaylistsService = Depends(get_playlists_service),
):
    result = await playlists.get_playlists(user_id)
    return {"status": "success", "data": {"playlists": result}}


@router.delete("/{playlist_id}")
async def delete_playlist(
    playlist_id: str,
    user_id: str = Depends(get_current_user_id),
    playlists: PlaylistsService = Depends(get_playlists_service),
):
    """
    Delete a playlist.
    Requires: playlist ownership
    """
    await playlists.delete_playlist(playlist_id, user_id)
    return {"status": "success", "message": "Playlist deleted"}


@router.post("/{playlist_id}/songs", status_code=status.HTTP_201_CREATED)
async def add_playlist_song(
    playlist_id: str,
    payload: PlaylistSongPayload,
    user_id: str = Depends(get_current_user_id),
    playlists: PlaylistsService = Depends(get_playlists_service),
):
    """
    Add a song to a playlist.
    Requires: playlist ownership
    """
    playlist_song_id = await playlists.add_playlist_song(playlist_id, payload.songId, user_id)
    return {
        "status": "success",
        "message": "Song added to playlist",
        "data": {"playlistSongId": playlist_song_id},
    }


@router.get("/{playlist_id}/songs")
async def get_playlist_songs(
    playlist_id: str,
    user_id: str = Depends(get_current_user_id),
    playlists: PlaylistsService = Depends(get_playlists_service),
):
    playlist = await playlists.get_playlist_songs(playlist_id, user_id)
    return {"status": "success", "data": {"playlist": playlist}}


@router.delete("/{playlist_id}/songs")
async def delete_playlist_song(
    playlist_id: str,
    payload: PlaylistSongPayload,
    user_id: str = Depends(get_current_user_id),
    playlists: PlaylistsService = Depends(get_playlists_service),
):
    """
    Remove a song from a playlist.
    Requires: playlist ownership
    """
    await playlists.delete_playlist_song(playlist_id, payload.songId, user_id)
    return {"status": "success", "message": "Song removed from playlist"}


@router.get("/{playlist_id}/activities")
async def get_playlist_activities(
    playlist_id: str,
    user_id: str = Depends(get_current_user_id),
    playlists: PlaylistsService = Depends(get_playlists_service),
):
    activities = await playlists.get_playlist_activities(playlist_id, user_id)
    return {
        "status": "success",
        "data": {"playlistId": playlist_id, "activities": activities},
    }
