# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Optional

from pluggy import HookspecMarker

from inventorykit.model import Inventory

hookspec = HookspecMarker("inventorykit")


@hookspec
def write_inventory(inventory: Inventory, outfile) -> None:
    """Writes the inventory to the given output file.

    Args:
        inventory (Inventory): The inventory to write.
        outfile: The output file handle to write the inventory to.
    """


@hookspec
# type: ignore[empty-body]
def read_inventory(infile) -> Inventory:
    """Reads an inventory from the given input file handle.

    Args:
        infile: The input file handle to read the inventory from.
    """


@hookspec
def short_name() -> Optional[str]:
    """A short name to register the hook as.

    Returns:
        Optional[str]: The name used to select the plugin on the command line.
    """
