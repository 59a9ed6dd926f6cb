from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from openmusic.auth import verify_token
from openmusic.cache import Cache
from openmusic.config import get_settings
from openmusic.database import Store
from openmusic.exceptions import AuthenticationError
from openmusic.services.activities import ActivitiesService
from openmusic.services.album_likes import AlbumLikesService
from openmusic.services.albums import AlbumsService
from openmusic.services.playlists import PlaylistsService
from openmusic.services.songs import SongsService

settings = get_settings()
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/authentications", auto_error=False)


async def get_store(request: Request) -> Store:
    """Store created in the application lifespan."""
    return request.app.state.store


async def get_cache(request: Request) -> Cache:
    """Cache created in the application lifespan."""
    return request.app.state.cache


async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """Extract the caller's user id from the bearer token"""
    if not token:
        raise AuthenticationError("Missing authentication")
    payload = verify_token(token)
    if payload is None:
        raise AuthenticationError("Invalid authentication token")
    return payload.sub


async def get_album_likes_service(
    store: Store = Depends(get_store),
    cache: Cache = Depends(get_cache),
) -> AlbumLikesService:
    """Dependency for AlbumLikesService."""
    return AlbumLikesService(store, cache, settings.likes_cache_ttl)


async def get_albums_service(
    store: Store = Depends(get_store),
    likes: AlbumLikesService = Depends(get_album_likes_service),
) -> AlbumsService:
    """Dependency for AlbumsService."""
    return AlbumsService(store, likes)


async def get_songs_service(store: Store = Depends(get_store)) -> SongsService:
    """Dependency for SongsService."""
    return SongsService(store)


async def get_playlists_service(store: Store = Depends(get_store)) -> PlaylistsService:
    """Dependency for PlaylistsService."""
    return PlaylistsService(store, ActivitiesService(store))
