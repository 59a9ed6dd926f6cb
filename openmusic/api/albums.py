from fastapi import APIRouter, Depends, Response, status

from openmusic.api.deps import (
    get_album_likes_service,
    get_albums_service,
    get_current_user_id,
)
from openmusic.config import get_settings
from openmusic.schemas import AlbumPayload
from openmusic.services.album_likes import AlbumLikesService
from openmusic.services.albums import AlbumsService

settings = get_settings()
router = APIRouter(prefix="/albums", tags=["Albums"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_album(
    payload: AlbumPayload,
    albums: AlbumsService = Depends(get_albums_service),
):
    album_id = await albums.add_album(payload.name, payload.year)
    return {"status": "success", "data": {"albumId": album_id}}


@router.get("/{album_id}")
async def get_album(album_id: str, albums: AlbumsService = Depends(get_albums_service)):
    album = await albums.get_album(album_id)
    return {"status": "success", "data": {"album": album}}


@router.put("/{album_id}")
async def edit_album(
    album_id: str,
    payload: AlbumPayload,
    albums: AlbumsService = Depends(get_albums_service),
):
    await albums.edit_album(album_id, payload.name, payload.year)
    return {"status": "success", "message": "Album updated"}


@router.delete("/{album_id}")
async def delete_album(album_id: str, albums: AlbumsService = Depends(get_albums_service)):
    await albums.delete_album(album_id)
    return {"status": "success", "message": "Album deleted"}


# ----- Likes -----

@router.post("/{album_id}/likes", status_code=status.HTTP_201_CREATED)
async def like_album(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    albums: AlbumsService = Depends(get_albums_service),
    likes: AlbumLikesService = Depends(get_album_likes_service),
):
    """
    Like an album. A second like by the same user is rejected.
    """
    await albums.ensure_album_exists(album_id)
    await likes.add_like(user_id, album_id)
    return {"status": "success", "message": "Album liked"}


@router.delete("/{album_id}/likes")
async def unlike_album(
    album_id: str,
    user_id: str = Depends(get_current_user_id),
    albums: AlbumsService = Depends(get_albums_service),
    likes: AlbumLikesService = Depends(get_album_likes_service),
):
    await albums.ensure_album_exists(album_id)
    await likes.remove_like(user_id, album_id)
    return {"status": "success", "message": "Album like removed"}


@router.get("/{album_id}/likes")
async def get_album_likes(
    album_id: str,
    response: Response,
    albums: AlbumsService = Depends(get_albums_service),
    likes: AlbumLikesService = Depends(get_album_likes_service),
):
    """
    Get the like count. Sets X-Data-Source: cache when the count was served
    from the cache.
    """
    await albums.ensure_album_exists(album_id)
    result = await likes.get_like_count(
        album_id,
        fallback_to_store=settings.likes_cache_fallback_to_store,
    )
    if result.from_cache:
        response.headers["X-Data-Source"] = "cache"
    return {"status": "success", "data": {"likes": result.count}}
