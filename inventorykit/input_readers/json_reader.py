# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from pathlib import Path
from typing import Optional, Union

from loguru import logger

import inventorykit.plugin
from inventorykit.model import Inventory
from inventorykit.utils import paths


@inventorykit.plugin.hookimpl
def read_inventory(infile) -> Inventory:
    return Inventory.from_json(infile.read())


@inventorykit.plugin.hookimpl
def short_name() -> Optional[str]:
    return "json"


def read_inventory_file(path: Union[str, Path]) -> Inventory:
    with open(path, "r", encoding="utf-8") as f:
        return read_inventory(f)


def read_inventory_dir(path: Union[str, Path], includes: str = "**/*.json") -> Inventory:
    """Aggregate all inventory files found below a folder.

    Files are processed in case-insensitive order of their relative path. An entry of a
    later file is only added when no entry with the same qualifier was read before.

    Args:
        path (Union[str, Path]): Folder to search.
        includes (str): Comma-separated Ant-style patterns selecting the inventory files.

    Returns:
        Inventory: The aggregated inventory.
    """
    base_dir = Path(path)
    aggregated = Inventory()
    relative_paths = sorted(paths.list_files(base_dir, paths.split_patterns(includes)), key=str.lower)
    for relative_path in relative_paths:
        logger.info(f"Reading inventory {relative_path}")
        aggregated.inherit_all(read_inventory_file(base_dir / relative_path), info_on_overwrite=True)
    return aggregated


def load_inventory(path: Union[str, Path], includes: str = "**/*.json") -> Inventory:
    """Read a single inventory file, or all inventory files of a folder."""
    if Path(path).is_dir():
        return read_inventory_dir(path, includes)
    return read_inventory_file(path)
