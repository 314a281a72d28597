# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional

from dataclasses_json import dataclass_json

from inventorykit.utils.identifiers import has_text

from ._base import AttributeModel

KEY_INCLUDE_PATTERN = "Include Pattern"
KEY_EXCLUDE_PATTERN = "Exclude Pattern"
KEY_COMPONENT_NAME = "Component Name"
KEY_COMPONENT_PART = "Component Part"
KEY_COMPONENT_VERSION = "Component Version"
KEY_VERSION_ANCHOR = "Version Anchor"
KEY_VERSION_ANCHOR_CHECKSUM = "Version Anchor Checksum"
KEY_TYPE = "Type"


@dataclass_json
@dataclass(eq=False)
class ComponentPatternData(AttributeModel):
    """Recognizes a component on disk by a version anchor file (and its checksum) and claims
    the files selected by the include/exclude patterns relative to the anchor."""

    KEY_FIELDS: ClassVar[Dict[str, str]] = {
        KEY_INCLUDE_PATTERN: "includePattern",
        KEY_EXCLUDE_PATTERN: "excludePattern",
        KEY_COMPONENT_NAME: "componentName",
        KEY_COMPONENT_PART: "componentPart",
        KEY_COMPONENT_VERSION: "componentVersion",
        KEY_VERSION_ANCHOR: "versionAnchor",
        KEY_VERSION_ANCHOR_CHECKSUM: "versionAnchorChecksum",
        KEY_TYPE: "type",
    }
    CORE_KEYS: ClassVar[tuple] = (
        KEY_INCLUDE_PATTERN,
        KEY_EXCLUDE_PATTERN,
        KEY_COMPONENT_NAME,
        KEY_COMPONENT_PART,
        KEY_COMPONENT_VERSION,
        KEY_VERSION_ANCHOR,
        KEY_VERSION_ANCHOR_CHECKSUM,
    )

    includePattern: Optional[str] = None
    excludePattern: Optional[str] = None
    componentName: Optional[str] = None
    componentPart: Optional[str] = None
    componentVersion: Optional[str] = None
    versionAnchor: Optional[str] = None
    versionAnchorChecksum: Optional[str] = None
    type: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        keys = [k for k in self.CORE_KEYS if k not in (KEY_INCLUDE_PATTERN, KEY_EXCLUDE_PATTERN)]
        return f"ComponentPatternData: {self.create_compare_string(keys)}"

    def is_valid(self) -> bool:
        return bool(self.includePattern)

    def derive_qualifier(self) -> str:
        return (
            f"{self.includePattern or ''}-{self.versionAnchor or ''}"
            f"-{self.versionAnchorChecksum or ''}"
        )

    def create_compare_string_representation(self) -> str:
        return self.create_compare_string(self.CORE_KEYS)

    def validate(self, context: str) -> None:
        """Raise a ValueError naming the first mandatory attribute that is blank.

        Args:
            context (str): Prefix for the error message, e.g. the inventory being processed.
        """
        for key in (
            KEY_INCLUDE_PATTERN,
            KEY_VERSION_ANCHOR,
            KEY_VERSION_ANCHOR_CHECKSUM,
            KEY_COMPONENT_PART,
        ):
            if not has_text(self.get(key)):
                raise ValueError(f"{context}: ComponentPatternData [{key}] must not be empty.")
