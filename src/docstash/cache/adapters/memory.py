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
"""In-process store backend."""

from __future__ import annotations

from docstash.cache.key import KeyPrefix
from docstash.cache.types import ItemRecord, UpsertOutcome


class InMemoryStoreBackend:
    """Store backend holding records in a dict.

    Suitable for development, testing, and single-process applications.
    Records do not survive a restart.
    """

    def __init__(self) -> None:
        self._records: dict[str, ItemRecord] = {}

    async def find_by_id(self, storage_id: str) -> ItemRecord | None:
        return self._records.get(storage_id)

    async def upsert(self, record: ItemRecord) -> UpsertOutcome:
        self._records[record.id] = record
        return UpsertOutcome.WRITTEN

    async def delete_by_prefix(self, prefix: KeyPrefix) -> int:
        doomed = [storage_id for storage_id in self._records if prefix.matches(storage_id)]
        for storage_id in doomed:
            del self._records[storage_id]
        return len(doomed)

    async def delete_expired(self, now: int) -> int:
        doomed = [storage_id for storage_id, record in self._records.items() if record.is_expired(now)]
        for storage_id in doomed:
            del self._records[storage_id]
        return len(doomed)

    async def drop_all(self) -> None:
        self._records.clear()

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._records)
