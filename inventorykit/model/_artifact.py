# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional, Set

from dataclasses_json import config, dataclass_json

from inventorykit.utils import identifiers
from inventorykit.utils.identifiers import has_text, normalize

from ._base import AttributeModel

# pylint: disable=too-many-instance-attributes

KEY_ID = "Id"
KEY_COMPONENT = "Component"
KEY_CHECKSUM = "Checksum"
KEY_VERSION = "Version"
KEY_LATEST_VERSION = "Latest Version"
KEY_CLASSIFICATION = "Classification"
KEY_LICENSE = "License"
KEY_GROUP_ID = "Group Id"
KEY_COMMENT = "Comment"
KEY_URL = "URL"
KEY_SECURITY_RELEVANT = "Security Relevance"
KEY_SECURITY_CATEGORY = "Security Category"
KEY_VULNERABILITY = "Vulnerability"
KEY_PROJECTS = "Projects"
KEY_VERIFIED = "Verified"
KEY_TYPE = "Type"


@dataclass_json
@dataclass(eq=False)
class Artifact(AttributeModel):
    """One discovered or declared piece of software (a file, package or library version)."""

    KEY_FIELDS: ClassVar[Dict[str, str]] = {
        KEY_ID: "id",
        KEY_COMPONENT: "component",
        KEY_CHECKSUM: "checksum",
        KEY_VERSION: "version",
        KEY_LATEST_VERSION: "latestVersion",
        KEY_CLASSIFICATION: "classification",
        KEY_LICENSE: "license",
        KEY_GROUP_ID: "groupId",
        KEY_COMMENT: "comment",
        KEY_URL: "url",
        KEY_SECURITY_RELEVANT: "securityRelevant",
        KEY_SECURITY_CATEGORY: "securityCategory",
        KEY_VULNERABILITY: "vulnerability",
        KEY_PROJECTS: "projects",
        KEY_VERIFIED: "verified",
    }
    FLAG_MARKERS: ClassVar[Dict[str, str]] = {
        KEY_VERIFIED: "X",
        KEY_SECURITY_RELEVANT: "true",
    }

    id: Optional[str] = None
    component: Optional[str] = None
    checksum: Optional[str] = None
    version: Optional[str] = None
    latestVersion: Optional[str] = None
    classification: Optional[str] = None
    license: Optional[str] = None
    groupId: Optional[str] = None
    comment: Optional[str] = None
    url: Optional[str] = None
    securityRelevant: bool = False
    securityCategory: Optional[str] = None
    vulnerability: Optional[str] = None
    projects: Optional[str] = None
    verified: bool = False
    attributes: Dict[str, str] = field(default_factory=dict)

    # derived from id and version; not serialized
    artifactId: Optional[str] = field(default=None, metadata=config(exclude=lambda _: True))
    # include the artifact and its metadata in reports
    relevant: bool = field(default=True, metadata=config(exclude=lambda _: True))
    # issues with the artifact metadata may fail the build
    managed: bool = field(default=True, metadata=config(exclude=lambda _: True))

    def __str__(self) -> str:
        return f"Artifact id: {self.id}, component: {self.component}, version: {self.version}"

    def get_projects(self) -> Set[str]:
        if not self.projects:
            return set()
        return {p.strip() for p in self.projects.split(",")}

    def add_project(self, project: Optional[str]) -> None:
        if not project or project in self.get_projects():
            return
        self.append(KEY_PROJECTS, project, ", ")

    def merge(self, other: Artifact) -> None:
        """Fill blank values of this artifact from other. Flags are OR'd and projects unioned."""
        if other.projects:
            for project in other.projects.split(","):
                self.add_project(project.strip())
        self.merge_attributes(other)
        self.derive_artifact_id()

    def derive_qualifier(self) -> str:
        """Identity key `id-checksum-version`; the component stands in for a blank id."""
        name = self.id if has_text(self.id) else self.component
        return f"{normalize(name)}-{normalize(self.checksum)}-{normalize(self.version)}"

    def derive_artifact_id(self) -> None:
        if self.artifactId is None:
            self.artifactId = self._effective_artifact_id()

    def _effective_artifact_id(self) -> Optional[str]:
        if self.artifactId is not None:
            return self.artifactId
        artifact_id = identifiers.extract_artifact_id(self.id, self.version)
        if artifact_id is None:
            artifact_id = self.id
        return artifact_id

    @staticmethod
    def extract_artifact_id(artifact_id: Optional[str], version: Optional[str]) -> Optional[str]:
        return identifiers.extract_artifact_id(artifact_id, version)

    def derive_version_from_id(self) -> Optional[str]:
        return identifiers.derive_version_from_id(self.id)

    def get_type(self) -> Optional[str]:
        return identifiers.infer_type_from_id(self.id, self.version)

    def get_classifier(self) -> Optional[str]:
        return identifiers.infer_classifier_from_id(self.id, self.version)

    def create_string_representation(self) -> str:
        """`groupId:artifactId:version[:classifier]:type`, used by pattern filters."""
        artifact_id = self._effective_artifact_id()
        parts = [self.groupId or "", artifact_id or "", self.version or ""]
        classifier = self.get_classifier()
        if classifier is not None:
            parts.append(classifier)
        # no type unless something was derived from the id
        if self.id is not None and self.id != artifact_id:
            parts.append(self.get_type() or "")
        else:
            parts.append("")
        return ":".join(parts)

    def create_compare_string_representation(self) -> str:
        values = [
            self.id,
            self.checksum,
            self.groupId,
            self._effective_artifact_id(),
            self.component,
            self.version,
            self.get_type(),
            self.classification,
            self.license,
            self.latestVersion,
            self.comment,
            self.securityCategory,
            self.get(KEY_SECURITY_RELEVANT),
            self.vulnerability,
        ]
        return ":".join(normalize(v) for v in values)

    def get_derived_license_folder(self) -> Optional[str]:
        # pylint: disable=import-outside-toplevel
        from ._license import LicenseMetaData

        return LicenseMetaData.derive_license_folder_name(self.license)

    def get_licenses(self) -> List[str]:
        return identifiers.tokenize_license(self.license)

    def has_classification(self, tag: str) -> bool:
        return self.classification is not None and tag in self.classification

    def is_enabled_for_distribution(self) -> bool:
        return not (self.has_classification("internal") or self.has_classification("banned"))

    def is_internal(self) -> bool:
        """Internal artifacts require a license association, but no component folder or notice."""
        return self.has_classification("internal")

    def is_banned(self) -> bool:
        return self.has_classification("banned")

    def is_valid(self) -> bool:
        return has_text(self._effective_artifact_id()) or has_text(self.component)
