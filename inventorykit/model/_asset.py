# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional

from dataclasses_json import dataclass_json

from ._base import AttributeModel

KEY_ASSET_ID = "Asset Id"
KEY_ASSET_CHECKSUM = "Checksum"
KEY_ASSET_FILE_PATH = "File Path"


@dataclass_json
@dataclass(eq=False)
class AssetMetaData(AttributeModel):
    """An asset (e.g. an expanded archive) artifacts can be associated with. Artifacts refer
    to an asset by carrying its asset id as attribute key."""

    KEY_FIELDS: ClassVar[Dict[str, str]] = {KEY_ASSET_ID: "assetId"}

    assetId: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def derive_qualifier(self) -> str:
        return self.assetId or ""

    def create_compare_string_representation(self) -> str:
        return self.create_compare_string(self.attribute_keys())
