# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Optional

import inventorykit.plugin
from inventorykit.model import Inventory


@inventorykit.plugin.hookimpl
def write_inventory(inventory: Inventory, outfile) -> None:
    outfile.write(inventory.to_json(indent=2))
    outfile.write("\n")


@inventorykit.plugin.hookimpl
def short_name() -> Optional[str]:
    return "json"
