# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
# pylint: disable=too-many-public-methods
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from dataclasses_json import dataclass_json
from loguru import logger

from inventorykit.utils.identifiers import (
    has_text,
    normalize,
    split_comma_separated,
    tokenize_license,
)

from ._artifact import Artifact
from ._asset import KEY_ASSET_ID, AssetMetaData
from ._license import ASTERISK, LicenseData, LicenseMetaData
from ._pattern import ComponentPatternData
from ._vulnerability import STATUS_VOID, VulnerabilityMetaData

CLASSIFICATION_CURRENT = "current"
DEFAULT_VULNERABILITY_CONTEXT = "default"


def is_wildcard_version(version: Optional[str]) -> bool:
    return version == ASTERISK


def is_variable_version(version: Optional[str]) -> bool:
    """Wildcards, blank versions and `${...}` placeholders are variable."""
    if is_wildcard_version(version) or not version:
        return True
    return version.startswith("$")


def matches_on_id(artifact_id: Optional[str], candidate: Artifact, allow_wildcards: bool) -> bool:
    """Check the id of a candidate against an id.

    With allow_wildcards, a candidate with version '*' may carry a single '*' in its id
    which matches any infix of the given id.
    """
    candidate_id = candidate.id
    if artifact_id is None and candidate_id is None:
        return True
    if candidate_id is None:
        return False
    if artifact_id is not None and artifact_id == candidate_id:
        return True

    if allow_wildcards and artifact_id is not None and is_wildcard_version(candidate.version):
        index = candidate_id.find(ASTERISK)
        if index != -1 and candidate_id.count(ASTERISK) == 1:
            prefix = candidate_id[:index]
            suffix = candidate_id[index + 1 :]
            if artifact_id.startswith(prefix) and artifact_id.endswith(suffix):
                return True
    return False


def matches_on_type(artifact: Artifact, candidate: Artifact) -> bool:
    artifact_type = artifact.get_type()
    candidate_type = candidate.get_type()
    if artifact_type is None and candidate_type is None:
        return True
    return artifact_type is not None and artifact_type == candidate_type


def matches_on_maven_properties(artifact: Artifact, candidate: Artifact) -> bool:
    if not matches_on_id(artifact.id, candidate, False):
        return False
    if not matches_on_type(artifact, candidate):
        return False
    for value in (
        candidate.groupId,
        candidate.artifactId,
        candidate.version,
        artifact.groupId,
        artifact.artifactId,
        artifact.version,
    ):
        if value is None:
            return False
    return (
        candidate.groupId.strip().lower() == artifact.groupId.strip().lower()
        and candidate.artifactId.strip().lower() == artifact.artifactId.strip().lower()
        and candidate.version.strip().lower() == artifact.version.strip().lower()
    )


def matches_checksum_or_checksums_incomplete(artifact: Artifact, reference: Artifact) -> bool:
    """Check that the versions are compatible and the checksums do not contradict.

    A variable reference version only matches a concrete one if it is the wildcard '*'.
    A wildcard on the side of the artifact being looked up never matches a concrete
    reference version. A blank checksum on either side is not a contradiction.
    """
    version = artifact.version
    reference_version = reference.version

    if reference_version != version:
        if not is_variable_version(version) and not is_variable_version(reference_version):
            return False
        if is_variable_version(reference_version) and not is_variable_version(version):
            if not is_wildcard_version(reference_version):
                return False
        if is_wildcard_version(version) and not is_variable_version(reference_version):
            return False

    if not has_text(artifact.checksum) or not has_text(reference.checksum):
        return True
    return artifact.checksum == reference.checksum


def _sort_key(artifact: Artifact) -> str:
    return ":".join(
        value if has_text(value) else ""
        for value in (artifact.groupId, artifact.artifactId, artifact.version)
    )


def _to_plain_vulnerability_id(value: str) -> Optional[str]:
    if not value:
        return None
    index = value.find(" ")
    return value if index == -1 else value[:index]


@dataclass_json
@dataclass
class Inventory:
    """Aggregate of artifacts and the metadata that describes them.

    The inventory is not synchronized; it is owned and mutated by one caller at a time.
    """

    artifacts: List[Artifact] = field(default_factory=list)
    licenseMetaData: List[LicenseMetaData] = field(default_factory=list)
    componentPatternData: List[ComponentPatternData] = field(default_factory=list)
    licenseData: List[LicenseData] = field(default_factory=list)
    vulnerabilityMetaData: Dict[str, List[VulnerabilityMetaData]] = field(default_factory=dict)
    assetMetaData: List[AssetMetaData] = field(default_factory=list)
    licenseNameMap: Dict[str, str] = field(default_factory=dict)
    componentNameMap: Dict[str, str] = field(default_factory=dict)

    def copy(self) -> Inventory:
        return copy.deepcopy(self)

    def has_information_other_than_artifacts(self) -> bool:
        return bool(
            self.licenseMetaData
            or self.componentPatternData
            or self.licenseData
            or self.assetMetaData
            or any(self.vulnerabilityMetaData.values())
        )

    # vulnerability contexts

    def get_vulnerability_meta_data(
        self, context: str = DEFAULT_VULNERABILITY_CONTEXT
    ) -> List[VulnerabilityMetaData]:
        return self.vulnerabilityMetaData.setdefault(context, [])

    def get_vulnerability_meta_data_contexts(self) -> List[str]:
        return list(self.vulnerabilityMetaData.keys())

    # artifact lookups

    def find_artifact(self, artifact: Artifact, fuzzy: bool = False) -> Optional[Artifact]:
        """Find the reference artifact that corresponds to the given artifact.

        Args:
            artifact (Artifact): The artifact to look up.
            fuzzy (bool): Also match on the plain id and finally on wildcard ids.

        Returns:
            Optional[Artifact]: The first matching artifact of this inventory, or None.
        """
        artifact.derive_artifact_id()
        for candidate in self.artifacts:
            candidate.derive_artifact_id()
            if matches_on_maven_properties(artifact, candidate):
                if matches_checksum_or_checksums_incomplete(artifact, candidate):
                    return candidate

        if not fuzzy:
            return None

        # a match on the id supports filesystem scans without maven metadata
        for candidate in self.artifacts:
            if matches_on_id(artifact.id, candidate, False):
                if matches_checksum_or_checksums_incomplete(artifact, candidate):
                    return candidate

        return self.find_artifact_matching_id(artifact.id)

    def find_artifact_matching_id(self, artifact_id: Optional[str]) -> Optional[Artifact]:
        """Wildcard-only lookup; the candidate with the longest (most specific) id wins."""
        maximum_match_length = -1
        longest_match = None
        for candidate in self.artifacts:
            if not matches_on_id(artifact_id, candidate, True):
                continue
            if candidate.id is None or candidate.id.count(ASTERISK) != 1 or candidate.checksum:
                continue
            if len(candidate.id) > maximum_match_length:
                longest_match = candidate
                maximum_match_length = len(candidate.id)
        return longest_match

    def find_artifact_by_id_and_checksum(
        self, artifact_id: Optional[str], checksum: Optional[str]
    ) -> Optional[Artifact]:
        if not has_text(artifact_id) or not has_text(checksum):
            return None
        trimmed_id = artifact_id.strip().lower()
        trimmed_checksum = checksum.strip().lower()
        for candidate in self.artifacts:
            if candidate.id is None or candidate.checksum is None:
                continue
            if (
                candidate.id.strip().lower() == trimmed_id
                and candidate.checksum.strip().lower() == trimmed_checksum
            ):
                return candidate
        return None

    def find_all_with_id(self, artifact_id: Optional[str]) -> List[Artifact]:
        if artifact_id is None:
            raise ValueError("Artifact id must not be None.")
        return [a for a in self.artifacts if a.id == artifact_id]

    def find_artifact_by_id(
        self, artifact_id: Optional[str], match_wildcards: bool = False
    ) -> Optional[Artifact]:
        if artifact_id is None:
            return None
        for candidate in self.artifacts:
            if candidate.id == artifact_id:
                return candidate
        if match_wildcards:
            for candidate in self.artifacts:
                if matches_on_id(artifact_id, candidate, True):
                    return candidate
        return None

    def find_artifacts_by_group_and_artifact_id(
        self, group_id: str, artifact_id: str
    ) -> List[Artifact]:
        matching = []
        for candidate in self.artifacts:
            candidate.derive_artifact_id()
            if candidate.artifactId is None or candidate.groupId is None:
                continue
            if candidate.artifactId.strip() != artifact_id.strip():
                continue
            if candidate.groupId.strip() != group_id.strip():
                continue
            matching.append(candidate)
        return matching

    def find_artifact_by_group_and_artifact_id(
        self, group_id: str, artifact_id: str
    ) -> Optional[Artifact]:
        matching = self.find_artifacts_by_group_and_artifact_id(group_id, artifact_id)
        return matching[0] if matching else None

    def find_matching_id(self, artifact: Artifact) -> Optional[Artifact]:
        artifact_id = normalize(artifact.id)
        if not artifact_id:
            return None
        for candidate in self.artifacts:
            if candidate is not artifact and normalize(candidate.id) == artifact_id:
                return candidate
        return None

    def _find_same_coordinates(self, artifact: Artifact, current_only: bool) -> Optional[Artifact]:
        if not normalize(artifact.id):
            return None
        artifact.derive_artifact_id()
        coordinates = (
            normalize(artifact.groupId),
            normalize(artifact.artifactId),
            normalize(artifact.get_classifier()),
            normalize(artifact.get_type()),
        )
        for candidate in self.artifacts:
            if candidate is artifact:
                continue
            if current_only and CLASSIFICATION_CURRENT not in normalize(candidate.classification):
                continue
            candidate.derive_artifact_id()
            candidate_coordinates = (
                normalize(candidate.groupId),
                normalize(candidate.artifactId),
                normalize(candidate.get_classifier()),
                normalize(candidate.get_type()),
            )
            if coordinates == candidate_coordinates:
                return candidate
        return None

    def find_current(self, artifact: Artifact) -> Optional[Artifact]:
        """Find another artifact with the same coordinates classified as 'current'."""
        return self._find_same_coordinates(artifact, current_only=True)

    def find_artifact_classification_agnostic(self, artifact: Artifact) -> Optional[Artifact]:
        return self._find_same_coordinates(artifact, current_only=False)

    # license lookups

    def find_matching_license_meta_data(
        self, component: Optional[str], license_name: Optional[str], version: Optional[str]
    ) -> Optional[LicenseMetaData]:
        """Find the license metadata for a component, license and version.

        Raises:
            RuntimeError: If more than one license metadata entry matches.
        """
        match = None
        for lmd in self.licenseMetaData:
            if (
                lmd.license == license_name
                and lmd.version in (version, ASTERISK)
                and lmd.component in (component, ASTERISK)
            ):
                if match is not None:
                    raise RuntimeError(
                        f"Multiple matches for component:version:license: "
                        f"{component}|{version}|{license_name}. Meta data inconsistent. "
                        f"Please correct license meta data to resolve inconsistencies."
                    )
                match = lmd
        return match

    def find_matching_license_meta_data_for(self, artifact: Artifact) -> Optional[LicenseMetaData]:
        return self.find_matching_license_meta_data(
            artifact.component, artifact.license, artifact.version
        )

    def find_matching_license_data(self, canonical_name: Optional[str]) -> Optional[LicenseData]:
        if not canonical_name:
            return None
        for license_data in self.licenseData:
            if canonical_name.strip() == license_data.canonicalName:
                return license_data
        return None

    def find_asset_meta_data(self, asset_id: Optional[str]) -> Optional[AssetMetaData]:
        if asset_id is None:
            return None
        for asset_meta_data in self.assetMetaData:
            if asset_meta_data.get(KEY_ASSET_ID) == asset_id:
                return asset_meta_data
        return None

    def get_effective_license(self, artifact: Optional[Artifact]) -> Optional[str]:
        """The license in effect for an artifact, resolved through its license metadata."""
        if artifact is None:
            return None
        effective_license = artifact.license
        if not artifact.component or not artifact.version or not artifact.license:
            return effective_license

        lmd = self.find_matching_license_meta_data_for(artifact)
        if lmd is None:
            return effective_license

        effective_license = lmd.derive_license_in_effect()
        if not effective_license:
            return None
        # license metadata separates licenses with '|'
        return effective_license.replace("|", ", ")

    def get_effective_licenses(self, artifact: Artifact) -> List[str]:
        return tokenize_license(self.get_effective_license(artifact), True, True)

    def get_license_folder(self, license_name: Optional[str]) -> Optional[str]:
        if has_text(license_name):
            return LicenseMetaData.derive_license_folder_name(license_name.strip())
        return None

    def evaluate_licenses(
        self,
        include_licenses_with_artifacts_only: bool = False,
        include_managed_artifacts_only: bool = False,
    ) -> List[str]:
        """Sorted names of the effective licenses of all relevant artifacts.

        Args:
            include_licenses_with_artifacts_only (bool): Skip artifacts without artifact id.
            include_managed_artifacts_only (bool): Skip artifacts that are not managed.

        Returns:
            List[str]: License names; parts of multi-licenses are listed individually as well.
        """
        licenses = set()
        for artifact in self.artifacts:
            if not artifact.relevant:
                continue
            if include_managed_artifacts_only and not artifact.managed:
                continue
            artifact.derive_artifact_id()
            if include_licenses_with_artifacts_only and not has_text(artifact.artifactId):
                continue
            for effective_license in self.get_effective_licenses(artifact):
                licenses.add(effective_license)
                parts = tokenize_license(effective_license, True, False)
                if len(parts) > 1:
                    licenses.update(parts)
        return sorted(licenses)

    # maintenance

    @staticmethod
    def sort_artifact_list(artifacts: List[Artifact]) -> None:
        artifacts.sort(key=_sort_key)

    def sort_artifacts(self) -> None:
        for artifact in self.artifacts:
            artifact.derive_artifact_id()
        self.sort_artifact_list(self.artifacts)

    def merge_duplicates(self) -> None:
        """Collapse artifacts describing the same file into one record.

        Artifacts are grouped by id (or component), version and groupId. Within a group,
        artifacts with a blank checksum join the artifacts that carry a checksum as long as
        the group carries a single checksum; different checksums stay separate. The
        earliest artifact of each group absorbs the others.
        """
        groups: Dict[tuple, List[Artifact]] = {}
        for artifact in self.artifacts:
            artifact.derive_artifact_id()
            name = artifact.id if has_text(artifact.id) else artifact.component
            if not has_text(name):
                continue
            groups.setdefault((name, artifact.version, artifact.groupId), []).append(artifact)

        merged_away = set()
        for members in groups.values():
            if len(members) < 2:
                continue
            checksums = {a.checksum for a in members if has_text(a.checksum)}
            subgroups: Dict[str, List[Artifact]] = {}
            for member in members:
                if len(checksums) == 1 or not has_text(member.checksum):
                    checksum_key = "" if len(checksums) != 1 else next(iter(checksums))
                else:
                    checksum_key = member.checksum
                subgroups.setdefault(checksum_key, []).append(member)

            for subgroup in subgroups.values():
                reference = subgroup[0]
                for other in subgroup[1:]:
                    reference.merge(other)
                    merged_away.add(id(other))

        self.artifacts = [a for a in self.artifacts if id(a) not in merged_away]

    def remove_inconsistencies(self) -> bool:
        """Remove both sides of artifacts that share component and version but differ in
        license.

        Returns:
            bool: False if any inconsistency was detected.
        """
        unique_keys = set()
        qualified_keys = set()
        by_key: Dict[str, Artifact] = {}
        consistent = True
        index = 1
        to_remove = set()

        self.sort_artifacts()
        for artifact in self.artifacts:
            if not has_text(artifact.component):
                continue
            key = f"{artifact.component}/{artifact.version}"
            qualifier = f"{key}/{artifact.license}/{artifact.version}"
            if key in unique_keys and qualifier not in qualified_keys:
                duplicate = by_key[key]
                logger.warning(
                    f"Detected inconsistency #{index}: "
                    f"{artifact.create_compare_string_representation()} "
                    f"{duplicate.create_compare_string_representation()}"
                )
                index += 1
                consistent = False
                to_remove.add(id(artifact))
                to_remove.add(id(duplicate))
            unique_keys.add(key)
            qualified_keys.add(qualifier)
            by_key[key] = artifact

        self.artifacts = [a for a in self.artifacts if id(a) not in to_remove]
        return consistent

    def _map_name(self, name_map: Dict[str, str], name: Optional[str]) -> Optional[str]:
        if name is None:
            return None
        return name_map.get(name.strip())

    def map_component_names(self) -> None:
        for entry in [*self.artifacts, *self.licenseMetaData]:
            mapped_name = self._map_name(self.componentNameMap, entry.component)
            if mapped_name is not None:
                entry.component = mapped_name

    def map_license_names(self) -> None:
        for entry in [*self.artifacts, *self.licenseMetaData]:
            mapped_name = self._map_name(self.licenseNameMap, entry.license)
            if mapped_name is not None:
                entry.license = mapped_name

    def cleanup(self) -> None:
        """Remove artifacts with neither id nor component."""
        self.artifacts = [a for a in self.artifacts if a.is_valid()]

    def get_filtered_inventory(self) -> Inventory:
        """Shallow copy holding only report-relevant artifacts. Metadata lists are shared."""
        return Inventory(
            artifacts=[a for a in self.artifacts if a.relevant],
            licenseMetaData=self.licenseMetaData,
            componentPatternData=self.componentPatternData,
            licenseData=self.licenseData,
            vulnerabilityMetaData=self.vulnerabilityMetaData,
            assetMetaData=self.assetMetaData,
            licenseNameMap=self.licenseNameMap,
            componentNameMap=self.componentNameMap,
        )

    def filter_license_meta_data(self) -> None:
        """Keep only license metadata matched by at least one artifact."""
        used = set()
        for artifact in self.artifacts:
            lmd = self.find_matching_license_meta_data_for(artifact)
            if lmd is not None:
                used.add(id(lmd))
        self.licenseMetaData = [lmd for lmd in self.licenseMetaData if id(lmd) in used]

    def filter_vulnerability_meta_data(self) -> None:
        """Keep vulnerability metadata that is void or referenced by an artifact."""
        covered = set()
        for artifact in self.artifacts:
            for value in split_comma_separated(artifact.vulnerability):
                plain_id = _to_plain_vulnerability_id(value)
                if plain_id is not None:
                    covered.add(plain_id)
        logger.debug(f"Covered vulnerabilities: {sorted(covered)}")

        for context, entries in self.vulnerabilityMetaData.items():
            retained = []
            for vmd in entries:
                if vmd.is_status(STATUS_VOID) or vmd.name in covered:
                    retained.append(vmd)
                else:
                    logger.debug(f"Removing vulnerability metadata for {vmd.name} ({context})")
            self.vulnerabilityMetaData[context] = retained

    # inheritance

    @staticmethod
    def _inherit(local: List, inherited: Sequence, label: str, info_on_overwrite: bool) -> None:
        local_by_qualifier = {entry.derive_qualifier(): entry for entry in local}
        for entry in inherited:
            qualifier = entry.derive_qualifier()
            local_entry = local_by_qualifier.get(qualifier)
            if local_entry is None:
                local.append(entry)
                continue
            if not info_on_overwrite:
                continue
            inherited_compare = entry.create_compare_string_representation()
            local_compare = local_entry.create_compare_string_representation()
            if inherited_compare == local_compare:
                logger.info(
                    f"{label} {qualifier} overwritten. Relevant content nevertheless matches. "
                    f"Consider removing the overwrite."
                )
            else:
                logger.info(
                    f"{label} {qualifier} overwritten. \n  {inherited_compare}\n  {local_compare}"
                )

    def inherit_artifacts(self, parent: Inventory, info_on_overwrite: bool = False) -> None:
        """Add the artifacts of parent unless an artifact with the same qualifier exists
        locally; local artifacts are never replaced."""
        for artifact in (*self.artifacts, *parent.artifacts):
            artifact.derive_artifact_id()
        self._inherit(self.artifacts, parent.artifacts, "Artifact", info_on_overwrite)

    def inherit_license_meta_data(self, parent: Inventory, info_on_overwrite: bool = False) -> None:
        self._inherit(
            self.licenseMetaData, parent.licenseMetaData, "License meta data", info_on_overwrite
        )

    def inherit_component_patterns(self, parent: Inventory, info_on_overwrite: bool = False) -> None:
        self._inherit(
            self.componentPatternData,
            parent.componentPatternData,
            "Component pattern",
            info_on_overwrite,
        )

    def inherit_license_data(self, parent: Inventory, info_on_overwrite: bool = False) -> None:
        self._inherit(self.licenseData, parent.licenseData, "License data", info_on_overwrite)

    def inherit_vulnerability_meta_data(
        self, parent: Inventory, info_on_overwrite: bool = False
    ) -> None:
        for context in parent.get_vulnerability_meta_data_contexts():
            self._inherit(
                self.get_vulnerability_meta_data(context),
                parent.get_vulnerability_meta_data(context),
                "Vulnerability metadata",
                info_on_overwrite,
            )

    def inherit_asset_meta_data(self, parent: Inventory, info_on_overwrite: bool = False) -> None:
        self._inherit(self.assetMetaData, parent.assetMetaData, "Asset metadata", info_on_overwrite)

    def inherit_all(self, parent: Inventory, info_on_overwrite: bool = False) -> None:
        self.inherit_artifacts(parent, info_on_overwrite)
        self.inherit_license_meta_data(parent, info_on_overwrite)
        self.inherit_component_patterns(parent, info_on_overwrite)
        self.inherit_license_data(parent, info_on_overwrite)
        self.inherit_vulnerability_meta_data(parent, info_on_overwrite)
        self.inherit_asset_meta_data(parent, info_on_overwrite)
