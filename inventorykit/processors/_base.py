# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Dict, List, Optional

from loguru import logger

from inventorykit.model import Inventory

FAIL_ON_ERROR = "failOnError"


def parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() == "true"


def split_regex_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]


class InventoryProcessor:
    """Base class of the processors that check or enrich an inventory in place.

    Processors are configured through a flat `key=value` property map.
    """

    def __init__(self, properties: Optional[Dict[str, str]] = None):
        self.properties: Dict[str, str] = dict(properties or {})

    @property
    def fail_on_error(self) -> bool:
        return self.get_bool(FAIL_ON_ERROR, True)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.properties.get(key, default)

    def get_bool(self, key: str, default: bool) -> bool:
        return parse_bool(self.properties.get(key), default)

    def require(self, key: str) -> str:
        value = self.properties.get(key)
        if value is None:
            raise ValueError(f"Property '{key}' must be set.")
        return value

    def log_finding(self, message: str) -> None:
        if self.fail_on_error:
            logger.error(message)
        else:
            logger.warning(message)

    def process(self, inventory: Inventory) -> None:
        raise NotImplementedError
