# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

import copy
from typing import ClassVar, Dict, Iterable, List, Optional, Type, TypeVar

from inventorykit.utils.identifiers import has_text

T = TypeVar("T", bound="AttributeModel")

_FLAG_VALUES = ("x", "true", "yes")


def parse_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _FLAG_VALUES


class AttributeModel:
    """Key/value access shared by all inventory records.

    Well-known keys (e.g. "Id", "License") are stored in named dataclass fields listed in
    KEY_FIELDS; any other key lands in the `attributes` mapping of the record. Setting a key
    to an empty value removes it. Boolean fields are exposed through their FLAG_MARKERS
    string when set and are absent otherwise.
    """

    KEY_FIELDS: ClassVar[Dict[str, str]] = {}
    FLAG_MARKERS: ClassVar[Dict[str, str]] = {}

    attributes: Dict[str, str]

    def __post_init__(self) -> None:
        # records loaded from JSON bypass set(); drop their empty values the same way
        for field_name in self.KEY_FIELDS.values():
            if getattr(self, field_name) == "":
                setattr(self, field_name, None)
        self.attributes = {key: value for key, value in self.attributes.items() if value}

    def get(self, key: Optional[str], default: Optional[str] = None) -> Optional[str]:
        if key is None:
            return None
        field_name = self.KEY_FIELDS.get(key)
        if field_name is None:
            value = self.attributes.get(key)
        else:
            value = getattr(self, field_name)
            if isinstance(value, bool):
                value = self.FLAG_MARKERS.get(key, "true") if value else None
        return value if value is not None else default

    def set(self, key: str, value: Optional[str]) -> None:
        field_name = self.KEY_FIELDS.get(key)
        if field_name is None:
            if value:
                self.attributes[key] = value
            else:
                self.attributes.pop(key, None)
        elif key in self.FLAG_MARKERS:
            setattr(self, field_name, parse_flag(value))
        else:
            setattr(self, field_name, value if value else None)

    def append(self, key: str, value: Optional[str], delimiter: str) -> None:
        current_value = self.get(key)
        if current_value is None:
            self.set(key, value)
        else:
            self.set(key, f"{current_value}{delimiter}{value}")

    def is_true(self, key: str) -> bool:
        value = self.get(key)
        return value is not None and value.lower() == "true"

    def attribute_keys(self) -> List[str]:
        keys = [key for key in self.KEY_FIELDS if self.get(key) is not None]
        keys.extend(self.attributes.keys())
        return keys

    def merge_attributes(self, other: AttributeModel) -> None:
        """Adopt the values of other for every key that is blank in this record."""
        for key in other.attribute_keys():
            if not has_text(self.get(key)):
                self.set(key, other.get(key))

    def create_compare_string(self, keys: Iterable[str]) -> str:
        return ":".join(self.get(key, "") for key in keys)

    def to_attribute_dict(self) -> Dict[str, str]:
        return {key: self.get(key) for key in self.attribute_keys()}

    @classmethod
    def from_attribute_dict(cls: Type[T], values: Dict[str, Optional[str]]) -> T:
        instance = cls()
        for key, value in values.items():
            instance.set(key, value)
        return instance

    def copy(self: T) -> T:
        return copy.deepcopy(self)
