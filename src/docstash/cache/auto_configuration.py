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
"""Build a configured CacheDriver from application configuration."""

from __future__ import annotations

import structlog

from docstash.cache.adapters.memory import InMemoryStoreBackend
from docstash.cache.driver import CacheDriver
from docstash.cache.ports.outbound import StoreBackend
from docstash.config.auto import STORE_PROVIDERS, AutoConfiguration
from docstash.config.properties.store import DEFAULT_URIS, StoreProperties
from docstash.core.config import Config
from docstash.kernel.exceptions import ConfigurationError

logger = structlog.get_logger("docstash.cache.auto_configuration")


def resolve_provider(props: StoreProperties) -> str:
    """Resolve ``auto`` to the best installed provider and check the rest."""
    provider = props.provider.lower()
    if provider == "auto":
        return AutoConfiguration.detect_store_provider()
    if provider == "memory":
        return provider
    module_name = STORE_PROVIDERS.get(provider)
    if module_name is None:
        raise ConfigurationError(
            f"Unknown store provider '{props.provider}'",
            code="CONFIG_004",
            context={"provider": props.provider},
        )
    if not AutoConfiguration.is_available(module_name):
        raise ConfigurationError(
            f"Store provider '{provider}' requires {module_name}, which is not installed",
            code="CONFIG_005",
            context={"provider": provider},
        )
    return provider


def create_backend(props: StoreProperties, provider: str) -> StoreBackend:
    """Create the client for *provider* from ``uri`` and wrap it in a backend."""
    if provider == "memory":
        return InMemoryStoreBackend()

    if not props.database:
        raise ConfigurationError("A database is required.", code="CONFIG_002", context={"option": "database"})

    uri = props.uri or DEFAULT_URIS[provider]

    if provider == "mongodb":
        from motor.motor_asyncio import AsyncIOMotorClient
        from pymongo.errors import ConfigurationError as MongoConfigurationError

        from docstash.cache.adapters.mongodb import MongoStoreBackend

        try:
            mongo_client: AsyncIOMotorClient = AsyncIOMotorClient(uri)  # type: ignore[type-arg]
        except (MongoConfigurationError, ValueError) as exc:
            raise _invalid_uri(provider, uri, exc) from exc
        return MongoStoreBackend.from_client(mongo_client, props.database, props.collection, owns_client=True)

    import redis.asyncio as aioredis

    from docstash.cache.adapters.redis import RedisStoreBackend

    try:
        redis_client = aioredis.from_url(uri)
    except ValueError as exc:
        raise _invalid_uri(provider, uri, exc) from exc
    return RedisStoreBackend.from_client(redis_client, props.database, props.collection, owns_client=True)


def _invalid_uri(provider: str, uri: str, exc: Exception) -> ConfigurationError:
    return ConfigurationError(
        f"Invalid {provider} uri '{uri}': {exc}",
        code="CONFIG_006",
        context={"option": "uri", "provider": provider},
    )


def create_driver(config: Config) -> CacheDriver:
    """Create a :class:`CacheDriver` from ``docstash.store.*``.

    The driver owns the client it creates; call :meth:`CacheDriver.stop`
    to close it.
    """
    props = config.bind(StoreProperties)
    provider = resolve_provider(props)
    backend = create_backend(props, provider)
    logger.info("auto_configured", subsystem="store", provider=provider)
    return CacheDriver(backend)
