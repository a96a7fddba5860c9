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
"""MongoDB store backend on top of a Motor collection."""

from __future__ import annotations

import inspect
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from pydantic import ValidationError
from pymongo.errors import BulkWriteError, ConnectionFailure, DuplicateKeyError, ExecutionTimeout

from docstash.cache.key import KeyPrefix
from docstash.cache.types import NEVER_EXPIRES, ItemRecord, UpsertOutcome
from docstash.kernel.exceptions import BackendUnavailable

logger = structlog.get_logger("docstash.cache.mongodb")


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (ConnectionFailure, ExecutionTimeout) as exc:
        raise BackendUnavailable(
            f"MongoDB {operation} failed: {exc}",
            code="STORE_001",
            context={"operation": operation, "backend": "mongodb"},
        ) from exc


class MongoStoreBackend:
    """Store backend that keeps one document per cache item.

    Documents look like ``{"_id": <encoded key>, "payload": <bytes>,
    "expiration": <epoch seconds>}``. Replacement is a single
    ``replace_one(..., upsert=True)`` so concurrent writers never produce
    two documents for one id.
    """

    def __init__(self, collection: Any, client: Any = None, owns_client: bool = False) -> None:
        self._collection = collection
        self._client = client
        self._owns_client = owns_client

    @classmethod
    def from_client(
        cls,
        client: Any,
        database: str,
        collection: str,
        owns_client: bool = False,
    ) -> MongoStoreBackend:
        """Select *collection* in *database* from a Motor client."""
        return cls(client[database][collection], client=client, owns_client=owns_client)

    @property
    def collection(self) -> Any:
        return self._collection

    async def find_by_id(self, storage_id: str) -> ItemRecord | None:
        with _store_errors("find"):
            doc = await self._collection.find_one({"_id": storage_id})
        if doc is None:
            return None
        try:
            return ItemRecord.model_validate(doc)
        except ValidationError:
            logger.warning("malformed_document", id=storage_id)
            return None

    async def upsert(self, record: ItemRecord) -> UpsertOutcome:
        with _store_errors("upsert"):
            try:
                await self._collection.replace_one({"_id": record.id}, record.to_document(), upsert=True)
            except (DuplicateKeyError, BulkWriteError):
                # Two upserts for a new _id can both attempt the insert.
                return UpsertOutcome.CONFLICT
        return UpsertOutcome.WRITTEN

    async def delete_by_prefix(self, prefix: KeyPrefix) -> int:
        with _store_errors("delete_by_prefix"):
            result = await self._collection.delete_many({"_id": {"$regex": prefix.regex}})
        return int(result.deleted_count)

    async def delete_expired(self, now: int) -> int:
        with _store_errors("delete_expired"):
            result = await self._collection.delete_many({"expiration": {"$gt": NEVER_EXPIRES, "$lte": now}})
        return int(result.deleted_count)

    async def drop_all(self) -> None:
        with _store_errors("drop"):
            await self._collection.drop()

    async def start(self) -> None:
        """Validate connectivity with a ``ping`` command."""
        with _store_errors("ping"):
            await self._collection.database.command("ping")

    async def stop(self) -> None:
        """Close the client when this backend created it."""
        if self._owns_client and self._client is not None:
            closing = self._client.close()
            if inspect.isawaitable(closing):
                await closing
