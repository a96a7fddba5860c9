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
"""Maintenance commands: purge, clear, info."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click
from rich.table import Table

from docstash.cache.auto_configuration import create_driver, resolve_provider
from docstash.cache.driver import CacheDriver
from docstash.cli.console import console
from docstash.config.properties.store import StoreProperties
from docstash.core.config import Config
from docstash.kernel.exceptions import DocStashException
from docstash.logging.structlog_adapter import configure_logging

T = TypeVar("T")


def _load_config(ctx: click.Context) -> Config:
    obj = ctx.ensure_object(dict)
    config = Config.from_file(obj.get("config_path"), active_profiles=obj.get("profiles"))
    configure_logging(config)
    return config


def _run(config: Config, operation: Callable[[CacheDriver], Awaitable[T]]) -> T:
    async def _main() -> T:
        driver = create_driver(config)
        await driver.start()
        try:
            return await operation(driver)
        finally:
            await driver.stop()

    try:
        return asyncio.run(_main())
    except DocStashException as exc:
        raise click.ClickException(str(exc)) from exc


@click.command("purge")
@click.pass_context
def purge_command(ctx: click.Context) -> None:
    """Delete every expired cache item."""
    config = _load_config(ctx)
    _run(config, lambda driver: driver.purge())
    console.print("[success]Expired items purged.[/success]")


@click.command("clear")
@click.argument("segments", nargs=-1)
@click.option("--yes", is_flag=True, help="Confirm clearing the whole cache.")
@click.pass_context
def clear_command(ctx: click.Context, segments: tuple[str, ...], yes: bool) -> None:
    """Clear the key SEGMENTS and everything nested under it.

    With no SEGMENTS the whole cache is dropped, which requires --yes.
    """
    if not segments and not yes:
        raise click.UsageError("Refusing to clear the whole cache without --yes.")
    config = _load_config(ctx)
    _run(config, lambda driver: driver.clear(list(segments) or None))
    target = "/".join(segments) if segments else "entire cache"
    console.print(f"[success]Cleared[/success] [info]{target}[/info]")


@click.command("info")
@click.pass_context
def info_command(ctx: click.Context) -> None:
    """Show the configured store."""
    config = _load_config(ctx)
    props = config.bind(StoreProperties)
    try:
        provider = resolve_provider(props)
    except DocStashException as exc:
        raise click.ClickException(str(exc)) from exc

    table = Table(title="docstash store", border_style="dim")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("provider", provider)
    table.add_row("database", str(props.database))
    table.add_row("collection", props.collection)
    table.add_row("client library available", "yes" if CacheDriver.is_available() else "no")
    table.add_row("config sources", ", ".join(config.loaded_sources))
    console.print(table)
