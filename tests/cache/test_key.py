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
"""Tests for key encoding, decoding and prefix matching."""

from __future__ import annotations

import re

import pytest

from docstash.cache.key import KeyPrefix, decode, encode, glob_escape, prefix_pattern
from docstash.kernel.exceptions import EncodingError, InvalidArgumentException


class TestEncode:
    def test_joins_segments_with_slash(self):
        assert encode(["users", "42", "profile"]) == "users/42/profile"

    def test_single_segment(self):
        assert encode(["config"]) == "config"

    def test_tuple_key(self):
        assert encode(("a", "b")) == "a/b"

    def test_escapes_delimiter_inside_segment(self):
        assert encode(["a/b"]) == "a%2Fb"

    def test_escapes_percent_inside_segment(self):
        assert encode(["100%"]) == "100%25"

    def test_distinct_keys_never_collide(self):
        keys = [
            ["a", "b"],
            ["a/b"],
            ["a%2Fb"],
            ["a%", "2Fb"],
            ["a", "", "b"],
            ["a", "b", ""],
            [""],
            ["", ""],
        ]
        encoded = [encode(k) for k in keys]
        assert len(set(encoded)) == len(keys)

    def test_rejects_bare_string(self):
        with pytest.raises(EncodingError):
            encode("users/42")  # type: ignore[arg-type]

    def test_rejects_empty_key(self):
        with pytest.raises(EncodingError):
            encode([])

    def test_rejects_non_string_segment(self):
        with pytest.raises(EncodingError) as exc_info:
            encode(["users", 42])  # type: ignore[list-item]
        assert exc_info.value.code == "KEY_001"

    def test_encoding_error_is_invalid_argument(self):
        with pytest.raises(InvalidArgumentException):
            encode([])


class TestDecode:
    @pytest.mark.parametrize(
        "key",
        [("a",), ("a", "b", "c"), ("a/b", "c"), ("50%", "off/"), ("", "x"), ("%2F",)],
    )
    def test_round_trip(self, key):
        storage_id = encode(key)
        assert decode(storage_id) == key
        assert encode(decode(storage_id)) == storage_id

    def test_rejects_unknown_escape(self):
        with pytest.raises(EncodingError):
            decode("a%41")

    def test_rejects_trailing_percent(self):
        with pytest.raises(EncodingError):
            decode("a/b%")

    def test_rejects_lowercase_escape(self):
        with pytest.raises(EncodingError):
            decode("a%2f")


class TestKeyPrefix:
    def test_matches_itself_and_descendants(self):
        prefix = prefix_pattern(["a"])
        assert prefix.matches("a")
        assert prefix.matches("a/b")
        assert prefix.matches("a/b/c")

    def test_does_not_match_string_siblings(self):
        prefix = prefix_pattern(["a"])
        assert not prefix.matches("ab")
        assert not prefix.matches("b/a")

    def test_regex_agrees_with_matches(self):
        prefix = prefix_pattern(["a", "b"])
        pattern = re.compile(prefix.regex)
        for candidate in ["a/b", "a/b/c", "a/bc", "a", "a/c", "a/b\n", "a/b\n/c"]:
            assert bool(pattern.search(candidate)) == prefix.matches(candidate)

    def test_regex_rejects_trailing_newline_sibling(self):
        prefix = prefix_pattern(["a"])
        storage_id = encode(["a\n"])
        assert not prefix.matches(storage_id)
        assert re.search(prefix.regex, storage_id) is None

    def test_regex_treats_segment_content_literally(self):
        prefix = prefix_pattern([".*"])
        pattern = re.compile(prefix.regex)
        assert pattern.search(".*/x")
        assert not pattern.search("anything")

    def test_escaped_delimiter_is_not_a_level(self):
        prefix = prefix_pattern(["a"])
        assert not prefix.matches(encode(["a/b"]))

    def test_globs(self):
        assert KeyPrefix("a/b").globs == ("a/b", "a/b/*")

    def test_globs_escape_metacharacters(self):
        assert prefix_pattern(["a*", "[x]?"]).globs == (r"a\*/\[x\]\?", r"a\*/\[x\]\?/*")

    def test_glob_escape_backslash(self):
        assert glob_escape("a\\b") == "a\\\\b"
