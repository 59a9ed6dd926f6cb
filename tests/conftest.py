import pytest

from openmusic.services.activities import ActivitiesService
from openmusic.services.album_likes import AlbumLikesService
from openmusic.services.albums import AlbumsService
from openmusic.services.playlists import PlaylistsService
from openmusic.services.songs import SongsService
from tests.fakes import FakeCache, FakeStore

CACHE_TTL = 1800


@pytest.fixture
def store():
    store = FakeStore()
    for user_id, username in [("u1", "dicoding"), ("u2", "johndoe"), ("u3", "janedoe")]:
        store.seed("users", id=user_id, username=username, password="secret", fullname=username.title())
    store.seed("albums", id="a1", name="Viva la Vida", year=2008, cover_url=None)
    store.seed("albums", id="a2", name="Parachutes", year=2000, cover_url=None)
    store.seed("songs", id="s1", title="Life in Technicolor", year=2008, genre="Indie",
               performer="Coldplay", duration=150, album_id="a1")
    store.seed("songs", id="s2", title="Yellow", year=2000, genre="Indie",
               performer="Coldplay", duration=266, album_id="a2")
    store.seed("playlists", id="p1", name="Road trip", owner="u1")
    return store


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def likes(store, cache):
    return AlbumLikesService(store, cache, CACHE_TTL)


@pytest.fixture
def activities(store):
    return ActivitiesService(store)


@pytest.fixture
def playlists(store, activities):
    return PlaylistsService(store, activities)


@pytest.fixture
def albums(store, likes):
    return AlbumsService(store, likes)


@pytest.fixture
def songs(store):
    return SongsService(store)
