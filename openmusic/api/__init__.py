from fastapi import APIRouter

from openmusic.api import albums, songs, playlists

router = APIRouter()

router.include_router(albums.router)
router.include_router(songs.router)
router.include_router(playlists.router)
