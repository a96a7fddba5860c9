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
"""StoreBackend protocol — the only seam that touches the physical store."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from docstash.cache.key import KeyPrefix
from docstash.cache.types import ItemRecord, UpsertOutcome


@runtime_checkable
class StoreBackend(Protocol):
    """Capability interface every storage technology implements.

    Conflicts from racing writers are returned as
    ``UpsertOutcome.CONFLICT``, never raised. Connectivity and timeout
    failures raise :class:`~docstash.kernel.exceptions.BackendUnavailable`.
    """

    async def find_by_id(self, storage_id: str) -> ItemRecord | None: ...

    async def upsert(self, record: ItemRecord) -> UpsertOutcome: ...

    async def delete_by_prefix(self, prefix: KeyPrefix) -> int: ...

    async def delete_expired(self, now: int) -> int: ...

    async def drop_all(self) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...
