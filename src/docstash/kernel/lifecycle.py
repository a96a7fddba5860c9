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
"""Unified lifecycle protocol for store backends.

Backends that own connections or pools implement this protocol. The driver
calls start() before first use and stop() on shutdown.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for infrastructure adapters."""

    async def start(self) -> None:
        """Validate connectivity.

        If the store cannot be reached, raise
        :class:`~docstash.kernel.exceptions.BackendUnavailable`.
        """
        ...

    async def stop(self) -> None:
        """Release connections. Best-effort."""
        ...
