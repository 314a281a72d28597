# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from loguru import logger

from inventorykit.model import Artifact, AssetMetaData, ComponentPatternData, Inventory
from inventorykit.model._artifact import KEY_TYPE
from inventorykit.model._asset import KEY_ASSET_CHECKSUM, KEY_ASSET_FILE_PATH
from inventorykit.scan.archives import unpack_if_possible
from inventorykit.scan.checksums import calc_file_checksum
from inventorykit.scan.jar_metadata import JarMetadataProbe
from inventorykit.utils import paths
from inventorykit.utils.identifiers import has_text

HINT_SCAN = "scan"
HINT_IGNORE = "ignore"
ASTERISK = "*"
DOT = "."


@dataclass
class MatchResult:
    component_pattern: ComponentPatternData
    anchor_file: Path
    base_dir: Path

    def derive_artifact(self, scan_base_dir: Path) -> Artifact:
        artifact = Artifact(
            id=self.component_pattern.componentPart,
            component=self.component_pattern.componentName,
            version=self.component_pattern.componentVersion,
        )
        artifact.add_project(paths.relative_posix_path(self.base_dir, scan_base_dir))
        artifact.set(KEY_TYPE, self.component_pattern.type)
        return artifact


def compute_component_base_dir(scan_base_dir: Path, anchor_file: Path, version_anchor: str) -> Path:
    """Walk up from the anchor file by the depth of the version anchor."""
    if version_anchor in (ASTERISK, DOT):
        return scan_base_dir
    base_dir = anchor_file
    for _ in range(version_anchor.count("/") + 1):
        if base_dir == scan_base_dir or base_dir.parent == base_dir:
            return scan_base_dir
        base_dir = base_dir.parent
    return base_dir


def extend_include_pattern(include_pattern: Optional[str], base_dir_path: str) -> Optional[str]:
    """Prefix each of the comma-separated include patterns with the component base dir."""
    if include_pattern is None:
        return None
    if base_dir_path in ("", DOT, "./"):
        return include_pattern
    return ",".join(
        paths.normalize_separators(f"{base_dir_path}/{p.strip()}") for p in include_pattern.split(",")
    )


def version_anchor_matches(version_anchor: str, path: str, is_pattern: bool) -> bool:
    if is_pattern:
        return paths.ant_match(f"**/{version_anchor}", path)
    return path.endswith(version_anchor)


def matches_checksum_if_available(artifact: Optional[Artifact], checksum: Optional[str]) -> bool:
    if artifact is None:
        return False
    if not has_text(artifact.checksum):
        return True
    return artifact.checksum == checksum


def apply_asset_id_chain(asset_id_chain: Sequence[str], artifact: Artifact) -> None:
    for asset_id in asset_id_chain:
        artifact.set(asset_id, "x")


class DirectoryInventoryScan:
    """Recursively scan a folder into an inventory.

    Component patterns of the reference inventory claim the files of recognized
    components. Remaining files are matched against the reference artifacts by name and
    checksum. Archives that are not otherwise known are expanded next to the archive file
    (into a `[<name>]` folder) and scanned as well.

    Args:
        input_dir: Folder holding the files to scan.
        scan_dir: Working folder; archives are expanded inside of it.
        includes: Ant-style patterns selecting the files to scan.
        excludes: Ant-style patterns of files to skip.
        reference_inventory: Inventory with the known artifacts and component patterns.
        enable_implicit_unpack: Expand unknown archives (jar files excluded).
        include_embedded: Add artifacts for the maven metadata embedded in fat jars.
    """

    # pylint: disable-next=too-many-positional-arguments
    def __init__(
        self,
        input_dir,
        scan_dir,
        includes: Optional[List[str]],
        excludes: Optional[List[str]],
        reference_inventory: Inventory,
        enable_implicit_unpack: bool = True,
        include_embedded: bool = False,
    ):
        self.input_dir = Path(input_dir)
        self.scan_dir = Path(scan_dir)
        self.includes = includes
        self.excludes = excludes
        self.reference_inventory = reference_inventory
        self.enable_implicit_unpack = enable_implicit_unpack
        self.include_embedded = include_embedded

    def create_scan_inventory(self) -> Inventory:
        """Copy the selected input files into a fresh scan folder, then scan it."""
        if self.scan_dir.exists():
            shutil.rmtree(self.scan_dir)
        self.scan_dir.mkdir(parents=True)

        for relative_path in paths.list_files(self.input_dir, self.includes, self.excludes):
            target = self.scan_dir / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.input_dir / relative_path, target)

        return self.perform_scan()

    def perform_scan(self) -> Inventory:
        scan_inventory = Inventory()
        self._scan_directory(self.scan_dir, self.scan_dir, scan_inventory, [])
        scan_inventory.merge_duplicates()
        JarMetadataProbe(str(self.scan_dir), self.include_embedded).process(scan_inventory)
        return scan_inventory

    def _scan_directory(
        self,
        scan_base_dir: Path,
        scan_dir: Path,
        scan_inventory: Inventory,
        asset_id_chain: List[str],
    ) -> None:
        logger.info(f"{scan_dir}: scanning...")
        files = [scan_dir / f for f in paths.list_files(scan_dir, self.includes, self.excludes)]
        normalized_paths = {f: paths.relative_posix_path(f, scan_base_dir) for f in files}

        logger.info(f"{scan_dir}: matching component patterns")
        match_results = self.match_component_patterns(files, normalized_paths, scan_base_dir, scan_dir)

        logger.info(f"{scan_dir}: filtering matched files")
        files, match_results = self.filter_files_matched_by_component_patterns(
            files, normalized_paths, scan_base_dir, match_results
        )

        for match_result in match_results:
            derived_artifact = match_result.derive_artifact(scan_base_dir)
            apply_asset_id_chain(asset_id_chain, derived_artifact)
            scan_inventory.artifacts.append(derived_artifact)

        logger.info(f"{scan_dir}: evaluating / recursing")
        self._populate_inventory_with_scanned_files(
            scan_base_dir, scan_inventory, files, asset_id_chain
        )
        logger.info(f"{scan_dir}: scanning completed.")

    def match_component_patterns(
        self,
        files: List[Path],
        normalized_paths: Dict[Path, str],
        scan_base_dir: Path,
        scan_dir: Path,
    ) -> List[MatchResult]:
        """Find the component patterns whose version anchor (and checksum) is present.

        Raises:
            ValueError: If a component pattern has no version anchor, a version anchor
                containing '**', no anchor checksum, or a '*'/'.' anchor with a specific checksum.
        """
        match_results = []
        for cpd in self.reference_inventory.componentPatternData:
            logger.debug(f"Checking component pattern: {cpd.create_compare_string_representation()}")
            anchor_checksum = cpd.versionAnchorChecksum
            version_anchor = cpd.versionAnchor

            if not has_text(version_anchor):
                raise ValueError(
                    f"The version anchor of component pattern [{cpd.includePattern}] must be defined."
                )
            if "**" in version_anchor:
                raise ValueError(
                    f"The version anchor of component pattern [{cpd.includePattern}] must not "
                    f"contain **. Use * only."
                )
            if not has_text(anchor_checksum):
                raise ValueError(
                    f"The version anchor checksum of component pattern [{cpd.includePattern}] "
                    f"must be defined."
                )

            version_anchor = paths.normalize_separators(version_anchor)
            if version_anchor in (ASTERISK, DOT):
                if anchor_checksum != ASTERISK:
                    raise ValueError(
                        f"The version anchor checksum of component pattern [{cpd.includePattern}] "
                        f"with version anchor [{version_anchor}] must be '*'."
                    )
                match_results.append(MatchResult(cpd.copy(), scan_dir, scan_dir))
                continue

            is_pattern = ASTERISK in version_anchor
            checksum_specific = anchor_checksum != ASTERISK
            # cheap pre-check on the longest literal piece of the anchor
            contains_check = max(version_anchor.split(ASTERISK), key=len)

            for file in files:
                normalized_path = normalized_paths[file]
                if contains_check not in normalized_path:
                    continue
                if not version_anchor_matches(version_anchor, normalized_path, is_pattern):
                    continue
                file_checksum = calc_file_checksum(file) if checksum_specific else ASTERISK
                if anchor_checksum.lower() != (file_checksum or "").lower():
                    logger.debug(f"Anchor checksum mismatch: {file}")
                    logger.debug(
                        f"Expected checksum: {anchor_checksum}; actual file checksum: {file_checksum}"
                    )
                    continue
                matched_cpd = cpd.copy()
                matched_cpd.versionAnchorChecksum = file_checksum
                match_results.append(
                    MatchResult(
                        matched_cpd,
                        file,
                        compute_component_base_dir(scan_base_dir, file, version_anchor),
                    )
                )
        return match_results

    def filter_files_matched_by_component_patterns(
        self,
        files: List[Path],
        normalized_paths: Dict[Path, str],
        scan_base_dir: Path,
        match_results: List[MatchResult],
    ):
        """Remove the files claimed by matched component patterns.

        Returns:
            tuple: The remaining files and the match results that claimed at least one file.
        """
        remaining = list(files)
        effective_results = []
        for match_result in match_results:
            cpd = match_result.component_pattern
            version_anchor = paths.normalize_separators(cpd.versionAnchor)
            base_dir = compute_component_base_dir(scan_base_dir, match_result.anchor_file, version_anchor)
            base_dir_path = paths.relative_posix_path(base_dir, scan_base_dir)
            include_pattern = extend_include_pattern(cpd.includePattern, base_dir_path)
            exclude_pattern = cpd.excludePattern

            matched_files = []
            for file in remaining:
                normalized_path = normalized_paths[file]
                if not paths.matches(include_pattern, normalized_path):
                    continue
                if exclude_pattern and paths.matches(exclude_pattern, normalized_path):
                    continue
                logger.debug(f"Filtered component file: {file} for component pattern {cpd.derive_qualifier()}")
                matched_files.append(file)

            if matched_files:
                effective_results.append(match_result)
                remaining = [f for f in remaining if f not in matched_files]
        return remaining, effective_results

    def _populate_inventory_with_scanned_files(
        self,
        scan_base_dir: Path,
        scan_inventory: Inventory,
        files: List[Path],
        asset_id_chain: List[str],
    ) -> None:
        reference = self.reference_inventory
        for file in files:
            name = file.name
            full_path = str(file)
            checksum = calc_file_checksum(file)
            project = paths.relative_posix_path(file, scan_base_dir)

            artifact = reference.find_artifact_by_id_and_checksum(name, checksum)
            if artifact is None:
                artifact = reference.find_artifact_by_id_and_checksum(full_path, checksum)
            if artifact is None:
                artifact = reference.find_artifact_by_id(name, True)
                if not matches_checksum_if_available(artifact, checksum):
                    artifact = None
            if artifact is None:
                artifact = reference.find_artifact_by_id(full_path, True)
                if not matches_checksum_if_available(artifact, checksum):
                    artifact = None

            target_folder = file.parent / f"[{name}]"
            if artifact is None:
                if self.enable_implicit_unpack and unpack_if_possible(
                    str(file), str(target_folder), include_modules=False
                ):
                    self._scan_directory(
                        scan_base_dir,
                        target_folder,
                        scan_inventory,
                        self._extend_asset_id_chain(asset_id_chain, file, checksum, scan_inventory),
                    )
                    continue
                unknown = Artifact(id=name, checksum=checksum)
                unknown.add_project(project)
                apply_asset_id_chain(asset_id_chain, unknown)
                scan_inventory.artifacts.append(unknown)
                continue

            artifact.add_project(project)
            if not artifact.has_classification(HINT_IGNORE):
                found = Artifact(id=name, checksum=checksum)
                found.add_project(project)
                apply_asset_id_chain(asset_id_chain, found)
                scan_inventory.artifacts.append(found)

            if artifact.has_classification(HINT_SCAN):
                if not unpack_if_possible(str(file), str(target_folder), include_modules=True):
                    raise RuntimeError(
                        f"The artifact with id {artifact.id} was classified to be scanned "
                        f"in-depth, but cannot be unpacked"
                    )
                self._scan_directory(
                    scan_base_dir,
                    target_folder,
                    scan_inventory,
                    self._extend_asset_id_chain(asset_id_chain, file, checksum, scan_inventory),
                )

    @staticmethod
    def _extend_asset_id_chain(
        asset_id_chain: List[str], archive_file: Path, checksum: Optional[str], inventory: Inventory
    ) -> List[str]:
        asset_id = f"AID-{archive_file.name}-{checksum}"
        asset_meta_data = AssetMetaData(assetId=asset_id)
        asset_meta_data.set(KEY_ASSET_CHECKSUM, checksum)
        asset_meta_data.set(KEY_ASSET_FILE_PATH, os.path.abspath(archive_file))
        inventory.assetMetaData.append(asset_meta_data)
        return [*asset_id_chain, asset_id]
