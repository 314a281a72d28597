# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Dict, Iterable, List, Optional, Set

from loguru import logger

from inventorykit.model import Artifact, Inventory, LicenseData
from inventorykit.model._artifact import KEY_PROJECTS
from inventorykit.model._asset import KEY_ASSET_ID
from inventorykit.utils.identifiers import has_text

DEFAULT_EXCLUDED_ATTRIBUTES = {
    "Verified",
    "Archive Path",
    "Latest Version",
    "Security Relevance",
    "Security Category",
    "WILDCARD-MATCH",
}
DEFAULT_MERGE_ATTRIBUTES = {KEY_PROJECTS, "Source Project"}


def matches_projects(artifact: Artifact, candidate: Artifact) -> bool:
    return any(
        location in candidate_location
        for location in artifact.get_projects()
        for candidate_location in candidate.get_projects()
    )


class InventoryMergeUtils:
    """Merge several (scan) inventories into one.

    Artifacts are merged, asset metadata and license data are added or merged, license
    metadata is inherited. Component patterns and vulnerability metadata of the target are
    left untouched.

    Args:
        excluded_attributes: Attributes dropped from the merged artifacts; they would make
            otherwise identical artifacts differ.
        merge_attributes: Attributes whose values are concatenated when two artifacts collapse.
    """

    def __init__(
        self,
        excluded_attributes: Optional[Iterable[str]] = None,
        merge_attributes: Optional[Iterable[str]] = None,
    ):
        self.excluded_attributes: Set[str] = set(DEFAULT_EXCLUDED_ATTRIBUTES)
        self.excluded_attributes.update(excluded_attributes or [])
        self.merge_attributes: Set[str] = set(DEFAULT_MERGE_ATTRIBUTES)
        self.merge_attributes.update(merge_attributes or [])

    def merge_inventories(self, sources: List[Inventory], target: Inventory) -> None:
        for source in sources:
            self._merge_artifacts(source, target)
            self._merge_asset_meta_data(source, target)
            self._merge_license_data(source, target)
            if source.licenseMetaData:
                target.inherit_license_meta_data(source, info_on_overwrite=False)

    def _merge_artifacts(self, source: Inventory, target: Inventory) -> None:
        # complete missing checksums; an existing checksum is never replaced
        for artifact in target.artifacts:
            if has_text(artifact.checksum) or artifact.id is None:
                continue
            for candidate in source.find_all_with_id(artifact.id):
                if matches_projects(artifact, candidate):
                    artifact.checksum = candidate.checksum

        for artifact in source.artifacts:
            if target.find_artifact_by_id_and_checksum(artifact.id, artifact.checksum) is None:
                target.artifacts.append(artifact)

        attribute_keys: Set[str] = set()
        for artifact in target.artifacts:
            for key in self.excluded_attributes:
                artifact.set(key, None)
            attribute_keys.update(artifact.attribute_keys())
        representation_keys = sorted(attribute_keys - self.merge_attributes, key=str.lower)

        retained: Dict[str, Artifact] = {}
        merged: List[Artifact] = []
        for artifact in target.artifacts:
            representation = ";".join(f"{key}={artifact.get(key)}" for key in representation_keys)
            retained_artifact = retained.get(representation)
            if retained_artifact is None:
                retained[representation] = artifact
                merged.append(artifact)
                continue
            logger.debug(f"Collapsing duplicate {artifact}")
            for key in sorted(self.merge_attributes):
                value = artifact.get(key)
                if has_text(value):
                    retained_artifact.append(key, value, ", ")
        target.artifacts = merged

    @staticmethod
    def _merge_asset_meta_data(source: Inventory, target: Inventory) -> None:
        for asset_meta_data in source.assetMetaData:
            if target.find_asset_meta_data(asset_meta_data.get(KEY_ASSET_ID)) is None:
                target.assetMetaData.append(asset_meta_data)

    @staticmethod
    def _merge_license_data(source: Inventory, target: Inventory) -> None:
        by_canonical_name: Dict[Optional[str], LicenseData] = {
            license_data.canonicalName: license_data for license_data in target.licenseData
        }
        for license_data in source.licenseData:
            existing = by_canonical_name.get(license_data.canonicalName)
            if existing is not None:
                existing.merge(license_data)
            else:
                target.licenseData.append(license_data)
                by_canonical_name[license_data.canonicalName] = license_data
