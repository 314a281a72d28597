# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from pathlib import Path
from typing import Dict, Iterable, Optional

import click

from inventorykit.configmanager import ConfigManager
from inventorykit.input_readers.json_reader import read_inventory_dir
from inventorykit.model import Inventory
from inventorykit.plugin.manager import find_io_plugin, get_plugin_manager
from inventorykit.scan.jar_metadata import parse_properties


def input_format_option(func):
    return click.option(
        "--input_format",
        is_flag=False,
        default=ConfigManager().get("core", "input_format"),
        help="Inventory input format, options=inventorykit.input_readers.json_reader",
    )(func)


def output_format_option(func):
    return click.option(
        "--output_format",
        is_flag=False,
        default=ConfigManager().get("core", "output_format"),
        help="Inventory output format, options=inventorykit.output.[json|csv]_writer",
    )(func)


def property_options(func):
    func = click.option(
        "--properties",
        "properties_file",
        type=click.File("r"),
        required=False,
        help="File with 'key=value' lines configuring the processor",
    )(func)
    return click.option(
        "-p",
        "--property",
        "property_values",
        multiple=True,
        help="Processor property as 'key=value'; may be repeated",
    )(func)


def collect_properties(property_values: Iterable[str], properties_file=None) -> Dict[str, str]:
    """Merge the properties of a file with `key=value` options; options take precedence."""
    properties: Dict[str, str] = {}
    if properties_file is not None:
        properties.update(parse_properties(properties_file.read()))
    for value in property_values:
        if "=" not in value:
            raise click.BadParameter(f"'{value}' is not in the format 'key=value'.", param_hint="-p")
        key, _, property_value = value.partition("=")
        properties[key.strip()] = property_value.strip()
    return properties


def read_inventory(path: str, input_format: str, includes: Optional[str] = None) -> Inventory:
    """Read an inventory file through the input plugin, or aggregate a folder of inventories."""
    if Path(path).is_dir():
        return read_inventory_dir(path, includes or "**/*.json")
    input_reader = find_io_plugin(get_plugin_manager(), input_format, "read_inventory")
    with open(path, "r", encoding="utf-8") as infile:
        return input_reader.read_inventory(infile)


def write_inventory(inventory: Inventory, outfile, output_format: str) -> None:
    output_writer = find_io_plugin(get_plugin_manager(), output_format, "write_inventory")
    output_writer.write_inventory(inventory, outfile)
