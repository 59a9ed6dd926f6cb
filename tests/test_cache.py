import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from openmusic.cache import Cache, CacheStatus
from openmusic.exceptions import CacheTransportFailure


class StubRedis:
    """Minimal async Redis client; set ``down`` to make every call fail."""

    def __init__(self):
        self.values = {}
        self.expiry = {}
        self.down = False
        self.closed = False

    def _check(self):
        if self.down:
            raise RedisConnectionError("Connection refused")

    async def get(self, key):
        self._check()
        return self.values.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.values[key] = value
        self.expiry[key] = ttl

    async def delete(self, key):
        self._check()
        return 1 if self.values.pop(key, None) is not None else 0

    async def ping(self):
        self._check()
        return True

    async def close(self):
        self.closed = True


@pytest.fixture
def client():
    return StubRedis()


@pytest.fixture
def redis_cache(client):
    return Cache("redis://localhost:6379", client=client)


class TestCacheLookup:
    """Three-way read result"""

    @pytest.mark.asyncio
    async def test_missing_key_is_absent(self, redis_cache):
        lookup = await redis_cache.get("album-likes:a1")
        assert lookup.status is CacheStatus.ABSENT
        assert not lookup.hit

    @pytest.mark.asyncio
    async def test_stored_value_is_hit(self, redis_cache):
        await redis_cache.set("album-likes:a1", "0", 60)

        lookup = await redis_cache.get("album-likes:a1")

        assert lookup.hit
        assert lookup.value == "0"

    @pytest.mark.asyncio
    async def test_transport_error_is_unavailable(self, redis_cache, client):
        client.down = True

        lookup = await redis_cache.get("album-likes:a1")

        assert lookup.status is CacheStatus.UNAVAILABLE
        assert isinstance(lookup.error, RedisConnectionError)

    @pytest.mark.asyncio
    async def test_not_connected_is_unavailable(self):
        lookup = await Cache("redis://localhost:6379").get("album-likes:a1")
        assert lookup.status is CacheStatus.UNAVAILABLE


class TestCacheWrites:
    @pytest.mark.asyncio
    async def test_set_uses_ttl(self, redis_cache, client):
        await redis_cache.set("album-likes:a1", "5", 1800)
        assert client.values["album-likes:a1"] == "5"
        assert client.expiry["album-likes:a1"] == 1800

    @pytest.mark.asyncio
    async def test_delete_removes_key(self, redis_cache, client):
        await redis_cache.set("album-likes:a1", "5", 1800)
        await redis_cache.delete("album-likes:a1")
        assert "album-likes:a1" not in client.values

    @pytest.mark.asyncio
    async def test_delete_missing_key_is_fine(self, redis_cache):
        await redis_cache.delete("album-likes:a1")

    @pytest.mark.asyncio
    async def test_write_failures_raise(self, redis_cache, client):
        client.down = True

        with pytest.raises(CacheTransportFailure) as exc_info:
            await redis_cache.set("album-likes:a1", "5", 1800)
        assert isinstance(exc_info.value.cause, RedisConnectionError)

        with pytest.raises(CacheTransportFailure):
            await redis_cache.delete("album-likes:a1")

    @pytest.mark.asyncio
    async def test_write_without_connection_raises(self):
        with pytest.raises(CacheTransportFailure):
            await Cache("redis://localhost:6379").set("album-likes:a1", "1", 60)


class TestCacheLifecycle:
    @pytest.mark.asyncio
    async def test_ping(self, redis_cache, client):
        assert await redis_cache.ping() is True
        client.down = True
        assert await redis_cache.ping() is False

    @pytest.mark.asyncio
    async def test_close(self, redis_cache, client):
        await redis_cache.close()
        assert client.closed
        assert await redis_cache.ping() is False
