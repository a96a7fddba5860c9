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
"""Store configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from docstash.core.config import config_properties

DEFAULT_COLLECTION = "stash.store"

DEFAULT_URIS: dict[str, str] = {
    "mongodb": "mongodb://localhost:27017",
    "redis": "redis://localhost:6379/0",
}


@config_properties(prefix="docstash.store")
@dataclass
class StoreProperties:
    """Configuration for the backing store (docstash.store.*).

    ``provider`` is one of ``auto``, ``mongodb``, ``redis`` or ``memory``.
    For MongoDB, ``database`` names the database and ``collection`` the
    collection. For Redis they form the key namespace. Without a ``uri``
    the provider's entry in ``DEFAULT_URIS`` is used.
    """

    provider: str = "auto"
    uri: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION
