# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import click

from inventorykit.cmd.common import input_format_option, output_format_option, read_inventory, write_inventory
from inventorykit.model import Inventory
from inventorykit.processors.merge import InventoryMergeUtils


@click.command("merge")
@click.argument("inventory_outfile", envvar="INVENTORY_OUTPUT", type=click.File("w"), required=True)
@click.argument("input_inventories", type=click.Path(exists=True), required=True, nargs=-1)
@click.option(
    "--exclude_attribute",
    "excluded_attributes",
    multiple=True,
    help="Additional artifact attribute to drop before identical artifacts are collapsed",
)
@input_format_option
@output_format_option
def merge_command(inventory_outfile, input_inventories, excluded_attributes, input_format, output_format):
    """Merge one or more INPUT_INVENTORIES into INVENTORY_OUTFILE."""
    sources = [read_inventory(path, input_format) for path in input_inventories]
    target = Inventory()
    InventoryMergeUtils(excluded_attributes=excluded_attributes).merge_inventories(sources, target)
    write_inventory(target, inventory_outfile, output_format)
