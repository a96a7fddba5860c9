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
"""CacheDriver — the contract the cache frontend talks to."""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from docstash.cache import registry as registry_module
from docstash.cache.key import Key, encode, prefix_pattern
from docstash.cache.ports.outbound import StoreBackend
from docstash.cache.registry import BackendRegistry
from docstash.cache.types import NEVER_EXPIRES, CacheItem, ItemRecord, UpsertOutcome
from docstash.config.properties.store import DEFAULT_COLLECTION
from docstash.kernel.exceptions import ConfigurationError

logger = structlog.get_logger("docstash.cache.driver")


class CacheDriver:
    """Persists cache items in a shared backing store.

    Keys are encoded with :mod:`docstash.cache.key` and every operation is
    a single round trip through a :class:`StoreBackend`. The driver keeps
    no state between calls apart from the backend handle.

    Values are stored as JSON. Expiration is epoch seconds (``0`` for
    never) and is returned by :meth:`get` without being enforced; treating
    an expired item as a miss is up to the caller.

    Usage::

        driver = CacheDriver()
        driver.configure({"connection": AsyncIOMotorClient(uri), "database": "app"})
        await driver.set(["users", "42"], {"name": "Ada"}, expiration=int(time.time()) + 300)
        item = await driver.get(["users", "42"])
    """

    def __init__(
        self,
        backend: StoreBackend | None = None,
        registry: BackendRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._registry = registry
        self._clock = clock

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @staticmethod
    def get_default_options() -> dict[str, Any]:
        return {
            "connection": None,
            "database": None,
            "collection": DEFAULT_COLLECTION,
        }

    def configure(self, options: Mapping[str, Any] | None = None) -> None:
        """Bind the driver to a store.

        Options:
            connection: client handle of a registered type. Required.
            database: database (or namespace) name. Required.
            collection: collection name, defaults to ``stash.store``.

        Raises:
            ConfigurationError: before any backend call, when the
                connection is not a supported client or the database is
                missing.
        """
        merged = {**self.get_default_options(), **(options or {})}
        registry = self._registry if self._registry is not None else registry_module.default_registry()

        client = merged["connection"]
        if client is None or not registry.supports(client):
            raise ConfigurationError(
                "A supported connection instance is required "
                f"(got {type(client).__name__}); expected one of: "
                f"{', '.join(t.__name__ for t in registry.client_types) or 'none installed'}",
                code="CONFIG_001",
                context={"option": "connection"},
            )

        database = merged["database"]
        if not database:
            raise ConfigurationError("A database is required.", code="CONFIG_002", context={"option": "database"})

        collection = merged["collection"] or DEFAULT_COLLECTION
        self._backend = registry.create(client, str(database), str(collection))
        logger.debug(
            "driver_configured",
            backend=type(self._backend).__name__,
            database=database,
            collection=collection,
        )

    @staticmethod
    def is_available() -> bool:
        """Whether a compatible store client library is importable."""
        return registry_module.is_available()

    @staticmethod
    def is_persistent() -> bool:
        return True

    @property
    def backend(self) -> StoreBackend:
        if self._backend is None:
            raise ConfigurationError("CacheDriver is not configured", code="CONFIG_003")
        return self._backend

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        await self.backend.start()

    async def stop(self) -> None:
        await self.backend.stop()

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    async def get(self, key: Key) -> CacheItem | None:
        """Return the stored value and its expiration, or ``None`` on a miss.

        A payload that cannot be deserialized counts as a miss.
        """
        storage_id = encode(key)
        record = await self.backend.find_by_id(storage_id)
        if record is None:
            return None
        try:
            data = json.loads(record.payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("malformed_payload", id=storage_id)
            return None
        return CacheItem(data=data, expiration=record.expiration)

    async def set(self, key: Key, data: Any, expiration: int = NEVER_EXPIRES) -> bool:
        """Store *data* under *key*. Always returns ``True``.

        When a concurrent writer wins the race for the same key, the write
        is reported as successful anyway: the peer's data is presumed
        equivalent or fresher. ``True`` is therefore not proof that this
        call's data was stored.
        """
        record = ItemRecord(
            id=encode(key),
            payload=json.dumps(data).encode(),
            expiration=int(expiration or NEVER_EXPIRES),
        )
        outcome = await self.backend.upsert(record)
        if outcome is UpsertOutcome.CONFLICT:
            logger.debug("write_conflict_ignored", id=record.id)
        return True

    async def clear(self, key: Key | None = None) -> bool:
        """Remove *key* and every key nested under it, or everything when *key* is empty."""
        if not key:
            await self.backend.drop_all()
            logger.info("cache_dropped")
            return True

        prefix = prefix_pattern(key)
        removed = await self.backend.delete_by_prefix(prefix)
        logger.debug("cache_cleared", prefix=prefix.prefix, removed=removed)
        return True

    async def purge(self) -> bool:
        """Delete every item whose expiration has passed."""
        now = int(self._clock())
        removed = await self.backend.delete_expired(now)
        logger.info("cache_purged", removed=removed, now=now)
        return True
