# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional

from dataclasses_json import dataclass_json

from inventorykit.utils.identifiers import has_text, normalize_id

from ._base import AttributeModel

ASTERISK = "*"

SOURCE_CATEGORY_ANNEX = "annex"
SOURCE_CATEGORY_RETAINED = "retained"
# deprecated categories, still accepted with a warning
SOURCE_CATEGORY_ADDITIONAL = "additional"
SOURCE_CATEGORY_EXTENDED = "extended"


@dataclass_json
@dataclass(eq=False)
class LicenseMetaData(AttributeModel):
    """Notice and effective license for a (component, version, license) triple. A version
    of '*' applies to all versions of the component."""

    KEY_FIELDS: ClassVar[Dict[str, str]] = {
        "Component": "component",
        "Version": "version",
        "License": "license",
        "License in Effect": "licenseInEffect",
        "License Notice": "notice",
        "Comment": "comment",
        "Source Category": "sourceCategory",
    }

    component: Optional[str] = None
    version: Optional[str] = None
    license: Optional[str] = None
    licenseInEffect: Optional[str] = None
    notice: Optional[str] = None
    comment: Optional[str] = None
    sourceCategory: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.create_compare_string_representation()

    def derive_qualifier(self) -> str:
        qualifier = f"{self.component or ''}-{self.license or ''}"
        if self.version is not None and self.version.strip() != ASTERISK:
            qualifier += f"-{self.version}"
        return qualifier

    def create_compare_string_representation(self) -> str:
        parts = [
            self.license,
            self.component,
            self.version,
            self.licenseInEffect,
            self.notice,
        ]
        if has_text(self.sourceCategory):
            parts.append(self.sourceCategory)
        if has_text(self.comment):
            parts.append(self.comment)
        return "/".join(p or "" for p in parts)

    def derive_license_in_effect(self) -> Optional[str]:
        if self.licenseInEffect:
            return self.licenseInEffect
        return self.license

    def is_valid(self) -> bool:
        return bool(self.component) and bool(self.license)

    @staticmethod
    def derive_license_folder_name(license_name: Optional[str]) -> Optional[str]:
        if license_name is None:
            return None
        return normalize_id(license_name)

    @staticmethod
    def derive_component_folder_name(
        component_name: Optional[str], version: Optional[str] = None
    ) -> Optional[str]:
        if component_name is None:
            return None
        if not version:
            return normalize_id(component_name)
        return normalize_id(f"{component_name}-{version}")


@dataclass_json
@dataclass(eq=False)
class LicenseData(AttributeModel):
    """Descriptive data of a license (canonical name, SPDX id, classification)."""

    KEY_FIELDS: ClassVar[Dict[str, str]] = {
        "Canonical Name": "canonicalName",
        "Id": "id",
        "SPDX Id": "spdxId",
        "OSI Approved": "osiApproved",
        "Copyleft Type": "copyleftType",
        "Commercial": "commercial",
        "RepresentedAs": "representedAs",
    }

    canonicalName: Optional[str] = None
    id: Optional[str] = None
    spdxId: Optional[str] = None
    osiApproved: Optional[str] = None
    copyleftType: Optional[str] = None
    commercial: Optional[str] = None
    representedAs: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def derive_qualifier(self) -> str:
        return f"{self.canonicalName or ''}-{self.id or ''}"

    def create_compare_string_representation(self) -> str:
        return self.create_compare_string(self.KEY_FIELDS.keys())

    def merge(self, other: LicenseData) -> None:
        self.merge_attributes(other)
