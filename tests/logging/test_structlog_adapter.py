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
"""Tests for StructlogAdapter — default LoggingPort implementation."""

import logging

import pytest
import structlog

from docstash.core.config import Config
from docstash.logging.port import LoggingPort
from docstash.logging.structlog_adapter import StructlogAdapter, configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"docstash": {"logging": {"level": {"root": "debug"}}}}))
        assert adapter._root_level == "DEBUG"

    def test_configure_reads_format(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"docstash": {"logging": {"format": "JSON"}}}))
        assert adapter._format == "json"

    def test_configure_reads_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config({"docstash": {"logging": {"level": {"root": "INFO", "docstash.cache": "debug"}}}})
        adapter.configure(config)
        assert adapter._module_levels == {"docstash.cache": "DEBUG"}
        assert logging.getLogger("docstash.cache").level == logging.DEBUG

    def test_configure_logging_returns_adapter(self):
        assert isinstance(configure_logging(Config({})), StructlogAdapter)


class TestStructlogAdapterGetLogger:
    def test_get_logger_returns_usable_logger(self):
        logger = StructlogAdapter().get_logger("docstash.test")
        assert hasattr(logger, "info")

    def test_set_level(self):
        StructlogAdapter().set_level("docstash.test.level", "warning")
        assert logging.getLogger("docstash.test.level").level == logging.WARNING


class TestStructlogAdapterLevelFromEnv:
    def test_bare_string_level_sets_root(self, monkeypatch):
        monkeypatch.setenv("DOCSTASH_LOGGING_LEVEL", "debug")
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "DEBUG"
        assert adapter._module_levels == {}
