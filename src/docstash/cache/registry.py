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
"""Registry mapping backend client types to store backend factories."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from docstash.cache.ports.outbound import StoreBackend
from docstash.config.auto import STORE_PROVIDERS, AutoConfiguration
from docstash.kernel.exceptions import ConfigurationError

BackendFactory = Callable[[Any, str, str], StoreBackend]


class BackendRegistry:
    """Resolves a client handle to the store backend that speaks to it.

    Client types are matched with ``isinstance`` in registration order,
    so register subclasses before their bases.
    """

    def __init__(self) -> None:
        self._factories: list[tuple[type, BackendFactory]] = []

    def register(self, client_type: type, factory: BackendFactory) -> None:
        self._factories.append((client_type, factory))

    @property
    def client_types(self) -> list[type]:
        return [client_type for client_type, _ in self._factories]

    def supports(self, client: Any) -> bool:
        return any(isinstance(client, client_type) for client_type, _ in self._factories)

    def create(self, client: Any, database: str, collection: str) -> StoreBackend:
        """Build the backend for *client*.

        Raises:
            ConfigurationError: *client* is not a registered client type.
        """
        for client_type, factory in self._factories:
            if isinstance(client, client_type):
                return factory(client, database, collection)
        expected = ", ".join(t.__name__ for t in self.client_types) or "none registered"
        raise ConfigurationError(
            f"Unsupported connection type {type(client).__name__}; expected one of: {expected}",
            code="CONFIG_001",
            context={"connection": type(client).__name__},
        )


def default_registry() -> BackendRegistry:
    """Registry with every client library importable in this environment."""
    registry = BackendRegistry()

    if AutoConfiguration.is_available("motor.motor_asyncio"):
        from motor.motor_asyncio import AsyncIOMotorClient

        from docstash.cache.adapters.mongodb import MongoStoreBackend

        registry.register(AsyncIOMotorClient, MongoStoreBackend.from_client)

    if AutoConfiguration.is_available("pymongo"):
        import pymongo

        from docstash.cache.adapters.mongodb import MongoStoreBackend

        async_client = getattr(pymongo, "AsyncMongoClient", None)
        if async_client is not None:
            registry.register(async_client, MongoStoreBackend.from_client)

    if AutoConfiguration.is_available("redis.asyncio"):
        from redis.asyncio import Redis

        from docstash.cache.adapters.redis import RedisStoreBackend

        registry.register(Redis, RedisStoreBackend.from_client)

    return registry


def is_available() -> bool:
    """Whether any supported store client library can be imported. Never raises."""
    return any(AutoConfiguration.is_available(module_name) for module_name in STORE_PROVIDERS.values())
