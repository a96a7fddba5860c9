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
"""Unified exception hierarchy for docstash.

All library exceptions inherit from DocStashException, enabling unified
error handling across modules.

Categories:
- InvalidArgumentException: Bad options or keys supplied by the caller
- InfrastructureException: Backing store failures
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class DocStashException(Exception):
    """Base exception for all docstash errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CONFIG_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Argument Exceptions
# =============================================================================


class InvalidArgumentException(DocStashException, ValueError):
    """An argument supplied by the caller is invalid."""


class ConfigurationError(InvalidArgumentException):
    """A driver option is missing or has the wrong type.

    Raised at setup time, before any backend call is attempted.
    """


class EncodingError(InvalidArgumentException):
    """A cache key cannot be encoded into (or decoded from) a storage id."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(DocStashException):
    """Infrastructure failures in the backing store."""


class BackendUnavailable(InfrastructureException):
    """The backing store could not be reached or timed out."""


class TransientWriteConflict(InfrastructureException):
    """Two writers raced on the same record.

    Backends report this as ``UpsertOutcome.CONFLICT`` and the driver
    treats it as a successful write; it never reaches driver callers.
    """
