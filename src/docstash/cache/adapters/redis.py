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
"""Redis store backend on top of a ``redis.asyncio.Redis``-like client."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from pydantic import ValidationError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from docstash.cache.key import KeyPrefix, glob_escape
from docstash.cache.types import ItemRecord, UpsertOutcome
from docstash.kernel.exceptions import BackendUnavailable

logger = structlog.get_logger("docstash.cache.redis")


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as exc:
        raise BackendUnavailable(
            f"Redis {operation} failed: {exc}",
            code="STORE_001",
            context={"operation": operation, "backend": "redis"},
        ) from exc


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


def _namespace_part(name: str) -> str:
    # ":" separates namespace parts from each other and from the id.
    return name.replace("%", "%25").replace(":", "%3A")


class RedisStoreBackend:
    """Store backend keeping each cache item in a Redis hash.

    The hash for id ``a/b`` lives at ``<namespace>:a/b`` and holds the
    ``payload`` and ``expiration`` fields. Expiration is stored, not handed
    to Redis, so items stay readable until :meth:`delete_expired` runs.
    The namespace is ``<database>:<collection>`` with ``:`` escaped in
    both names, so two namespaces never share keys.
    """

    def __init__(self, client: Any, namespace: str, owns_client: bool = False) -> None:
        self._client = client
        self._namespace = namespace
        self._owns_client = owns_client

    @classmethod
    def from_client(
        cls,
        client: Any,
        database: str,
        collection: str,
        owns_client: bool = False,
    ) -> RedisStoreBackend:
        namespace = f"{_namespace_part(database)}:{_namespace_part(collection)}"
        return cls(client, namespace, owns_client=owns_client)

    @property
    def namespace(self) -> str:
        return self._namespace

    def _redis_key(self, storage_id: str) -> str:
        return f"{self._namespace}:{storage_id}"

    def _storage_id(self, redis_key: Any) -> str:
        return _text(redis_key)[len(self._namespace) + 1 :]

    async def _scan(self, pattern: str) -> AsyncIterator[Any]:
        namespace = glob_escape(self._namespace)
        async for redis_key in self._client.scan_iter(match=f"{namespace}:{pattern}"):
            yield redis_key

    async def find_by_id(self, storage_id: str) -> ItemRecord | None:
        with _store_errors("find"):
            raw = await self._client.hgetall(self._redis_key(storage_id))
        if not raw:
            return None
        fields = {_text(name): value for name, value in raw.items()}
        try:
            return ItemRecord(
                id=storage_id,
                payload=fields["payload"],
                expiration=int(fields.get("expiration", 0)),
            )
        except (KeyError, ValueError, ValidationError):
            logger.warning("malformed_document", id=storage_id)
            return None

    async def upsert(self, record: ItemRecord) -> UpsertOutcome:
        # HSET replaces both fields in one atomic command.
        with _store_errors("upsert"):
            await self._client.hset(
                self._redis_key(record.id),
                mapping={"payload": record.payload, "expiration": record.expiration},
            )
        return UpsertOutcome.WRITTEN

    async def delete_by_prefix(self, prefix: KeyPrefix) -> int:
        doomed: set[str] = set()
        with _store_errors("delete_by_prefix"):
            for pattern in prefix.globs:
                async for redis_key in self._scan(pattern):
                    if prefix.matches(self._storage_id(redis_key)):
                        doomed.add(_text(redis_key))
            if not doomed:
                return 0
            return int(await self._client.delete(*doomed))

    async def delete_expired(self, now: int) -> int:
        doomed: list[str] = []
        with _store_errors("delete_expired"):
            async for redis_key in self._scan("*"):
                expiration = await self._client.hget(redis_key, "expiration")
                if expiration is None:
                    continue
                try:
                    value = int(_text(expiration))
                except ValueError:
                    continue
                if 0 < value <= now:
                    doomed.append(_text(redis_key))
            if not doomed:
                return 0
            return int(await self._client.delete(*doomed))

    async def drop_all(self) -> None:
        """Delete every item in this backend's namespace."""
        with _store_errors("drop"):
            keys = [_text(redis_key) async for redis_key in self._scan("*")]
            if keys:
                await self._client.delete(*keys)

    async def start(self) -> None:
        """Validate connectivity by pinging Redis."""
        with _store_errors("ping"):
            await self._client.ping()

    async def stop(self) -> None:
        """Close the connection when this backend created it."""
        if self._owns_client:
            await self._client.aclose()
