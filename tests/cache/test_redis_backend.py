# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for RedisStoreBackend using a FakeRedis stub."""

from __future__ import annotations

import fnmatch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from docstash.cache.adapters.redis import RedisStoreBackend
from docstash.cache.driver import CacheDriver
from docstash.cache.key import prefix_pattern
from docstash.cache.ports.outbound import StoreBackend
from docstash.cache.registry import BackendRegistry
from docstash.cache.types import CacheItem, ItemRecord, UpsertOutcome
from docstash.kernel.exceptions import BackendUnavailable

NOW = 1_700_000_000


class FakeRedis:
    """Minimal in-memory stub matching the redis.asyncio.Redis hash interface."""

    def __init__(self) -> None:
        self._store: dict[str, dict[bytes, bytes]] = {}
        self.closed = False

    @staticmethod
    def _bytes(value) -> bytes:
        if isinstance(value, bytes):
            return value
        return str(value).encode()

    async def hgetall(self, key: str) -> dict[bytes, bytes]:
        return dict(self._store.get(key, {}))

    async def hget(self, key, field: str) -> bytes | None:
        key = key.decode() if isinstance(key, bytes) else key
        return self._store.get(key, {}).get(field.encode())

    async def hset(self, key: str, mapping: dict) -> int:
        entry = self._store.setdefault(key, {})
        added = sum(1 for name in mapping if name.encode() not in entry)
        entry.update({name.encode(): self._bytes(value) for name, value in mapping.items()})
        return added

    async def delete(self, *keys) -> int:
        count = 0
        for k in keys:
            k = k.decode() if isinstance(k, bytes) else k
            if k in self._store:
                del self._store[k]
                count += 1
        return count

    async def scan_iter(self, match: str = "*"):
        for key in list(self._store):
            if fnmatch.fnmatchcase(key, match):
                yield key.encode()

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


class DownRedis(FakeRedis):
    async def hgetall(self, key: str):
        raise RedisConnectionError("Connection refused")

    async def ping(self) -> bool:
        raise RedisConnectionError("Connection refused")


@pytest.fixture
def redis_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def backend(redis_client) -> RedisStoreBackend:
    return RedisStoreBackend.from_client(redis_client, "app", "stash.store")


class TestRedisStoreBackend:
    def test_protocol_compliance(self, backend):
        assert isinstance(backend, StoreBackend)

    def test_namespace_from_database_and_collection(self, backend):
        assert backend.namespace == "app:stash.store"

    @pytest.mark.asyncio
    async def test_upsert_and_find(self, backend, redis_client):
        outcome = await backend.upsert(ItemRecord(id="a/b", payload=b"1", expiration=NOW))
        assert outcome is UpsertOutcome.WRITTEN
        assert "app:stash.store:a/b" in redis_client._store
        assert await backend.find_by_id("a/b") == ItemRecord(id="a/b", payload=b"1", expiration=NOW)

    @pytest.mark.asyncio
    async def test_find_missing(self, backend):
        assert await backend.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_malformed_hash_is_a_miss(self, backend, redis_client):
        await redis_client.hset("app:stash.store:bad", mapping={"expiration": 1})
        assert await backend.find_by_id("bad") is None

    @pytest.mark.asyncio
    async def test_delete_by_prefix(self, backend):
        for storage_id in ["a", "a/b", "a/b/c", "ab", "b/a"]:
            await backend.upsert(ItemRecord(id=storage_id, payload=b"1"))
        assert await backend.delete_by_prefix(prefix_pattern(["a"])) == 3
        assert await backend.find_by_id("ab") is not None
        assert await backend.find_by_id("b/a") is not None

    @pytest.mark.asyncio
    async def test_delete_by_prefix_nothing_matches(self, backend):
        assert await backend.delete_by_prefix(prefix_pattern(["x"])) == 0

    @pytest.mark.asyncio
    async def test_delete_expired(self, backend):
        await backend.upsert(ItemRecord(id="old", payload=b"1", expiration=NOW - 1))
        await backend.upsert(ItemRecord(id="edge", payload=b"1", expiration=NOW))
        await backend.upsert(ItemRecord(id="new", payload=b"1", expiration=NOW + 1))
        await backend.upsert(ItemRecord(id="never", payload=b"1"))
        assert await backend.delete_expired(NOW) == 2
        assert await backend.find_by_id("new") is not None
        assert await backend.find_by_id("never") is not None

    @pytest.mark.asyncio
    async def test_drop_all_keeps_other_namespaces(self, backend, redis_client):
        await backend.upsert(ItemRecord(id="a", payload=b"1"))
        await redis_client.hset("other:key", mapping={"payload": b"x"})
        await backend.drop_all()
        assert await backend.find_by_id("a") is None
        assert "other:key" in redis_client._store

    @pytest.mark.asyncio
    async def test_connection_error_raises_backend_unavailable(self):
        backend = RedisStoreBackend(DownRedis(), "app:stash.store")
        with pytest.raises(BackendUnavailable):
            await backend.find_by_id("k")
        with pytest.raises(BackendUnavailable):
            await backend.start()

    @pytest.mark.asyncio
    async def test_stop_closes_only_owned_client(self):
        borrowed, owned = FakeRedis(), FakeRedis()
        await RedisStoreBackend(borrowed, "ns").stop()
        await RedisStoreBackend(owned, "ns", owns_client=True).stop()
        assert borrowed.closed is False
        assert owned.closed is True


class TestCacheDriverOnRedis:
    @pytest.mark.asyncio
    async def test_round_trip_through_registry(self, redis_client):
        registry = BackendRegistry()
        registry.register(FakeRedis, RedisStoreBackend.from_client)
        driver = CacheDriver(registry=registry, clock=lambda: NOW)
        driver.configure({"connection": redis_client, "database": "app"})

        await driver.set(["a", "b"], {"n": 1}, NOW - 1)
        await driver.set(["a", "c"], {"n": 2})
        assert await driver.get(["a", "b"]) == CacheItem({"n": 1}, NOW - 1)

        await driver.purge()
        assert await driver.get(["a", "b"]) is None
        assert await driver.get(["a", "c"]) == CacheItem({"n": 2}, 0)

        await driver.clear(["a"])
        assert await driver.get(["a", "c"]) is None


class TestRedisNamespaces:
    def test_colon_in_names_is_escaped(self):
        backend = RedisStoreBackend.from_client(FakeRedis(), "app", "s:x")
        assert backend.namespace == "app:s%3Ax"

    @pytest.mark.asyncio
    async def test_namespaces_sharing_a_colon_do_not_collide(self, redis_client):
        short = RedisStoreBackend.from_client(redis_client, "app", "s")
        long = RedisStoreBackend.from_client(redis_client, "app", "s:x")
        await short.upsert(ItemRecord(id="x:k", payload=b"short"))
        await long.upsert(ItemRecord(id="k", payload=b"long"))

        record = await long.find_by_id("k")
        assert record is not None
        assert record.payload == b"long"

        await short.drop_all()
        assert await long.find_by_id("k") is not None
        assert await short.find_by_id("x:k") is None
