# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from loguru import logger

from inventorykit.input_readers.json_reader import load_inventory
from inventorykit.model import Inventory
from inventorykit.processors._base import InventoryProcessor

INPUT_INVENTORY = "input.inventory.path"


class InheritInventoryProcessor(InventoryProcessor):
    """Add the artifacts and license metadata of an input inventory that the processed
    inventory does not define itself. Entries of the processed inventory always win."""

    def load_input_inventory(self) -> Inventory:
        path = self.get(INPUT_INVENTORY)
        if path is None:
            raise ValueError(f"Please specify the '{INPUT_INVENTORY}' property.")
        logger.info(f"Inheriting from {path}")
        return load_inventory(path)

    def process(self, inventory: Inventory) -> None:
        input_inventory = self.load_input_inventory()
        inventory.inherit_artifacts(input_inventory, info_on_overwrite=True)
        inventory.inherit_license_meta_data(input_inventory, info_on_overwrite=True)
