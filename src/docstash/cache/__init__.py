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
"""docstash cache — a cache driver persisting items in a shared store."""

from docstash.cache.adapters.memory import InMemoryStoreBackend
from docstash.cache.driver import CacheDriver
from docstash.cache.key import KeyPrefix, decode, encode, prefix_pattern
from docstash.cache.ports.outbound import StoreBackend
from docstash.cache.registry import BackendRegistry, default_registry
from docstash.cache.types import CacheItem, ItemRecord, UpsertOutcome

__all__ = [
    "BackendRegistry",
    "CacheDriver",
    "CacheItem",
    "InMemoryStoreBackend",
    "ItemRecord",
    "KeyPrefix",
    "StoreBackend",
    "UpsertOutcome",
    "decode",
    "default_registry",
    "encode",
    "prefix_pattern",
]
