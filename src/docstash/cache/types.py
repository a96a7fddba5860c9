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
"""Cache item types shared by the driver and store backends."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NEVER_EXPIRES = 0


class ItemRecord(BaseModel):
    """The persisted form of one cache item.

    ``id`` is the encoded key and is stored as ``_id`` so the model maps
    directly onto a MongoDB document. ``expiration`` is epoch seconds;
    ``0`` means the item never expires.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="_id")
    payload: bytes
    expiration: int = NEVER_EXPIRES

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @property
    def expires(self) -> bool:
        return self.expiration > NEVER_EXPIRES

    def is_expired(self, now: int) -> bool:
        return self.expires and self.expiration <= now


@dataclass(frozen=True)
class CacheItem:
    """What the driver returns from a hit: the stored value and its expiration."""

    data: Any
    expiration: int


class UpsertOutcome(Enum):
    """Result of a store upsert."""

    WRITTEN = "written"
    # A racing writer stored the same id first; its data is presumed as fresh.
    CONFLICT = "conflict"
