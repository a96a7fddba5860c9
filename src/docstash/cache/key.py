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
"""Hierarchical cache keys and their storage ids.

A key is an ordered sequence of string segments. Its id joins the
segments with ``/``; inside a segment ``%`` is written ``%25`` and ``/`` is
written ``%2F``, so every sequence of strings has exactly one id and every
id decodes back to exactly one sequence.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from docstash.kernel.exceptions import EncodingError

DELIMITER = "/"

Key = Sequence[str]

_ESCAPE_RE = re.compile(r"%(25|2F)?")
_UNESCAPED = {"25": "%", "2F": "/"}
_GLOB_SPECIAL_RE = re.compile(r"([*?\[\]\\])")


def glob_escape(text: str) -> str:
    """Escape glob metacharacters so *text* matches only itself."""
    return _GLOB_SPECIAL_RE.sub(r"\\\1", text)


def _escape(segment: str) -> str:
    return segment.replace("%", "%25").replace(DELIMITER, "%2F")


def _unescape(segment: str, storage_id: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        code = match.group(1)
        if code is None:
            raise EncodingError(
                f"Malformed escape in storage id '{storage_id}'",
                code="KEY_002",
                context={"id": storage_id},
            )
        return _UNESCAPED[code]

    return _ESCAPE_RE.sub(_replace, segment)


def encode(key: Key) -> str:
    """Encode *key* into its storage id.

    Raises:
        EncodingError: *key* is a bare string, is empty, or holds a
            non-string segment.
    """
    if isinstance(key, (str, bytes)) or not isinstance(key, Sequence):
        raise EncodingError(
            f"A key must be a sequence of string segments, got {type(key).__name__}",
            code="KEY_001",
        )
    if not key:
        raise EncodingError("A key needs at least one segment", code="KEY_001")
    for segment in key:
        if not isinstance(segment, str):
            raise EncodingError(
                f"Key segment {segment!r} is not a string",
                code="KEY_001",
                context={"segment": repr(segment)},
            )
    return DELIMITER.join(_escape(segment) for segment in key)


def decode(storage_id: str) -> tuple[str, ...]:
    """Decode a storage id back into its key segments."""
    return tuple(_unescape(part, storage_id) for part in storage_id.split(DELIMITER))


@dataclass(frozen=True)
class KeyPrefix:
    """Matches a key's id and the ids of every key nested under it.

    ``["a"]`` matches ``a`` and ``a/b`` but not its sibling ``ab``.
    """

    prefix: str

    @property
    def regex(self) -> str:
        """Anchored regular expression; segment content is matched literally.

        ``$`` also matches before a trailing newline, so the end is guarded
        to keep ``a`` from matching the sibling id ``a\\n``.
        """
        return f"^{re.escape(self.prefix)}(?:{DELIMITER}|$(?!\\n))"

    @property
    def globs(self) -> tuple[str, str]:
        """Glob patterns for stores that scan with glob-style matching."""
        literal = glob_escape(self.prefix)
        return literal, f"{literal}{DELIMITER}*"

    def matches(self, storage_id: str) -> bool:
        return storage_id == self.prefix or storage_id.startswith(self.prefix + DELIMITER)


def prefix_pattern(key: Key) -> KeyPrefix:
    """Build the matcher used to clear *key* and all of its descendants."""
    return KeyPrefix(encode(key))
