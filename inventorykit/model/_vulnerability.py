# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional

from dataclasses_json import dataclass_json

from ._base import AttributeModel

STATUS_VOID = "void"
STATUS_IN_REVIEW = "in review"

KEY_NAME = "Name"
KEY_STATUS = "Status"
KEY_CVSS_MODIFIED_SEVERITY_V3 = "CVSS Modified Severity (v3)"
KEY_CVSS_UNMODIFIED_SEVERITY_V3 = "CVSS Unmodified Severity (v3)"
KEY_CVSS_MODIFIED_SEVERITY_V2 = "CVSS Modified Severity (v2)"
KEY_CVSS_UNMODIFIED_SEVERITY_V2 = "CVSS Unmodified Severity (v2)"


@dataclass_json
@dataclass(eq=False)
class VulnerabilityMetaData(AttributeModel):
    KEY_FIELDS: ClassVar[Dict[str, str]] = {
        KEY_NAME: "name",
        KEY_STATUS: "status",
        "URL": "url",
        "Advisories": "advisories",
        "CVSS Unmodified Score (v3)": "cvssUnmodifiedScoreV3",
        KEY_CVSS_UNMODIFIED_SEVERITY_V3: "cvssUnmodifiedSeverityV3",
        "CVSS Modified Score (v3)": "cvssModifiedScoreV3",
        KEY_CVSS_MODIFIED_SEVERITY_V3: "cvssModifiedSeverityV3",
        "CVSS Unmodified Score (v2)": "cvssUnmodifiedScoreV2",
        KEY_CVSS_UNMODIFIED_SEVERITY_V2: "cvssUnmodifiedSeverityV2",
        "CVSS Modified Score (v2)": "cvssModifiedScoreV2",
        KEY_CVSS_MODIFIED_SEVERITY_V2: "cvssModifiedSeverityV2",
    }

    name: Optional[str] = None
    status: Optional[str] = None
    url: Optional[str] = None
    advisories: Optional[str] = None
    cvssUnmodifiedScoreV3: Optional[str] = None
    cvssUnmodifiedSeverityV3: Optional[str] = None
    cvssModifiedScoreV3: Optional[str] = None
    cvssModifiedSeverityV3: Optional[str] = None
    cvssUnmodifiedScoreV2: Optional[str] = None
    cvssUnmodifiedSeverityV2: Optional[str] = None
    cvssModifiedScoreV2: Optional[str] = None
    cvssModifiedSeverityV2: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def derive_qualifier(self) -> str:
        return self.name or ""

    def create_compare_string_representation(self) -> str:
        return self.create_compare_string(self.attribute_keys())

    def is_status(self, status: str) -> bool:
        return self.status is not None and self.status.strip().lower() == status.lower()
