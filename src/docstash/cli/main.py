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
"""docstash CLI — cache maintenance from the command line."""

from __future__ import annotations

import click

from docstash.cli.commands import clear_command, info_command, purge_command


@click.group()
@click.version_option(package_name="docstash")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML or TOML configuration file.",
)
@click.option("--profile", "profiles", multiple=True, help="Active profile overlay (repeatable).")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, profiles: tuple[str, ...]) -> None:
    """docstash — maintain a shared cache store."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["profiles"] = list(profiles)


cli.add_command(purge_command, name="purge")
cli.add_command(clear_command, name="clear")
cli.add_command(info_command, name="info")
