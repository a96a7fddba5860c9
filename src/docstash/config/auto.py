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
"""Provider detection by checking importable packages."""

from __future__ import annotations

import importlib

import structlog

logger = structlog.get_logger("docstash.config.auto")

# provider name -> module that must be importable for it
STORE_PROVIDERS: dict[str, str] = {
    "mongodb": "motor.motor_asyncio",
    "redis": "redis.asyncio",
}


class AutoConfiguration:
    """Detect available store client libraries."""

    @staticmethod
    def is_available(module_name: str) -> bool:
        """Check if a Python package is importable."""
        try:
            importlib.import_module(module_name)
            return True
        except ImportError:
            return False

    @staticmethod
    def detect_store_provider() -> str:
        """Detect the best available store provider."""
        for provider, module_name in STORE_PROVIDERS.items():
            if AutoConfiguration.is_available(module_name):
                logger.debug("store_provider_detected", provider=provider)
                return provider
        return "memory"
