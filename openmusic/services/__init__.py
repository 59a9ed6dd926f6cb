from openmusic.services.activities import ActivitiesService
from openmusic.services.album_likes import AlbumLikesService, LikeCount
from openmusic.services.albums import AlbumsService
from openmusic.services.playlists import PlaylistsService
from openmusic.services.songs import SongsService

__all__ = [
    "ActivitiesService",
    "AlbumLikesService",
    "LikeCount",
    "AlbumsService",
    "PlaylistsService",
    "SongsService",
]
