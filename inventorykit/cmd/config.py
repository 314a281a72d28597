# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Any, List, Optional, Tuple

import click

from inventorykit.configmanager import ConfigManager


def split_key(key: str) -> Tuple[str, str]:
    section, dot, option = key.partition(".")
    if not dot or not section or not option:
        raise SystemExit("Invalid KEY given. Is it in the format 'section.option'?")
    return section, option


def convert_value(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    return value


@click.command("config")
@click.argument("key", required=True)
@click.argument("values", nargs=-1)
def config(key: str, values: Optional[List[str]]):
    """Show or change a setting.

    KEY has the format 'section.option', e.g. 'core.output_format'. Without VALUES the
    current value is shown; several VALUES are stored as a list.
    """
    section, option = split_key(key)
    config_manager = ConfigManager()

    if not values:
        result = config_manager.get(section, option)
        if result is None:
            click.echo(f"Configuration '{key}' not found.")
        else:
            click.echo(f"{key} = {result}")
        return

    converted = [convert_value(value) for value in values]
    final_value = converted[0] if len(converted) == 1 else converted
    config_manager.set(section, option, final_value)
    click.echo(f"Configuration '{key}' set to '{final_value}'.")
