# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import os
import re
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Set

from loguru import logger

from inventorykit.model import Artifact, Inventory, LicenseMetaData
from inventorykit.model._inventory import CLASSIFICATION_CURRENT
from inventorykit.model._license import (
    SOURCE_CATEGORY_ADDITIONAL,
    SOURCE_CATEGORY_ANNEX,
    SOURCE_CATEGORY_EXTENDED,
    SOURCE_CATEGORY_RETAINED,
)
from inventorykit.processors._base import InventoryProcessor
from inventorykit.utils.identifiers import has_text

LICENSES_DIR = "licenses.path"
COMPONENTS_DIR = "components.path"
LICENSES_TARGET_DIR = "licenses.target.path"
COMPONENTS_TARGET_DIR = "components.target.path"
VALIDATE_LICENSE_FOLDERS = "validate.license.folders"
VALIDATE_COMPONENT_FOLDERS = "validate.component.folders"
CREATE_LICENSE_FOLDERS = "create.license.folders"
CREATE_COMPONENT_FOLDERS = "create.component.folders"
DELETE_LICENSE_FOLDERS = "delete.license.folders"
DELETE_COMPONENT_FOLDERS = "delete.component.folders"

KEY_WILDCARD_MATCH = "WILDCARD-MATCH"
VERSION_PLACEHOLDER_PREFIX = "${"
VERSION_PLACEHOLDER_SUFFIX = "}"

NOTICE_ELEMENTS = ("p", "codeph", "filename", "i", "li", "ol", "ul", "strong", "line", "lines", "lq", "b")
SUSPICIOUS_SEQUENCES = (" .</", 'IS"WITHOUT', "infromation", "Infromation", "sofware", "Sofware")

# qualifiers that do not change the license text
LICENSE_ADDONS = ("(or any later version)", "or any later version", "(with subcomponents)", "(with-subcomponents)")


def split_licenses(license_expression: Optional[str], separator_regex: str) -> List[str]:
    if not has_text(license_expression):
        return []
    return [part.strip() for part in re.split(separator_regex, license_expression) if part.strip()]


def _append_unique(values: List[str], value: Optional[str]) -> None:
    if value not in values:
        values.append(value)


def list_subdirectories(base_dir: Optional[str]) -> List[str]:
    if base_dir is None or not os.path.isdir(base_dir):
        return []
    return sorted(entry.name for entry in os.scandir(base_dir) if entry.is_dir())


def is_empty_folder(base_dir: Optional[str], name: str) -> bool:
    """A folder counts as empty when it has no direct non-hidden files."""
    if base_dir is None:
        return True
    folder = Path(base_dir) / name
    if not folder.is_dir():
        return True
    return not any(f.is_file() and not f.name.startswith(".") for f in folder.iterdir())


class ValidateInventoryProcessor(InventoryProcessor):
    """Check an inventory for missing or inconsistent license and component information.

    Each finding is logged with a running number and a proposal. License and component
    folders (one folder per license / component, holding license texts and notices) are
    validated against the inventory and can be created or deleted on request.

    Raises:
        ValueError: A folder validation is enabled, but its base path is not configured.
        RuntimeError: At the end of `process` if findings exist and `failOnError` is set.
    """

    def __init__(self, properties: Optional[Dict[str, str]] = None):
        super().__init__(properties)
        self.index = 1
        self.error = False

    def finding(self, message: str, proposal: Optional[str] = None) -> None:
        self.log_finding(f"{self.index:04d}: {message}")
        if proposal:
            self.log_finding(f"      Proposal: {proposal}")
        self.index += 1
        self.error = True

    def process(self, inventory: Inventory) -> None:
        validate_license_folders = self.get_bool(VALIDATE_LICENSE_FOLDERS, True)
        validate_component_folders = self.get_bool(VALIDATE_COMPONENT_FOLDERS, True)

        licenses_base_dir = self.get(LICENSES_DIR)
        if licenses_base_dir is None and validate_license_folders:
            raise ValueError(f"Property '{LICENSES_DIR}' must be set.")
        components_base_dir = self.get(COMPONENTS_DIR)
        if components_base_dir is None and validate_component_folders:
            raise ValueError(f"Property '{COMPONENTS_DIR}' must be set.")

        self.index = 1
        self.error = False

        license_folders: List[str] = []
        component_folders: List[str] = []
        license_references: List[str] = []
        licenses_requiring_notice: Set[str] = set()

        for artifact in inventory.artifacts:
            self._collect_artifact(
                inventory, artifact, license_folders, component_folders, license_references, licenses_requiring_notice
            )

        self._check_duplicates(inventory)
        self._check_current(inventory)
        self._check_required_notices(inventory, licenses_requiring_notice)

        if validate_license_folders:
            self._check_license_folders(
                licenses_base_dir, self.get(LICENSES_TARGET_DIR, licenses_base_dir), license_folders
            )
        if validate_component_folders:
            self._check_component_folders(
                components_base_dir, self.get(COMPONENTS_TARGET_DIR, components_base_dir), component_folders
            )

        self._check_license_meta_data(inventory, license_references)
        self._check_unique_component_license(inventory)
        self._check_version_in_id(inventory)
        for license_meta_data in inventory.licenseMetaData:
            self._check_notice(license_meta_data)

        if self.error and self.fail_on_error:
            raise RuntimeError("Validation error detected. See previous log output.")

    # pylint: disable-next=too-many-positional-arguments
    def _collect_artifact(
        self,
        inventory: Inventory,
        artifact: Artifact,
        license_folders: List[str],
        component_folders: List[str],
        license_references: List[str],
        licenses_requiring_notice: Set[str],
    ) -> None:
        artifact.derive_artifact_id()
        license_name = artifact.license
        if has_text(license_name) and "|" in license_name:
            self.finding(
                f"Artifact '{artifact.id}' associated license contains '|'.",
                "correct associated license.",
            )
            return

        component = artifact.component
        version = artifact.version
        if not artifact.is_banned():
            missing = False
            if not has_text(license_name):
                self.finding(f"Artifact '{artifact.id}' without license.", "add license association.")
                missing = True
            if not has_text(component):
                self.finding(f"Artifact '{artifact.id}' without component.", "add component / group name.")
                missing = True
            if not has_text(version):
                self.finding(f"Artifact '{artifact.id}' without version.", "add version.")
                missing = True
            if missing:
                return

        if not artifact.is_enabled_for_distribution():
            return

        for single_license in self._distinct_licenses(license_name):
            _append_unique(license_folders, inventory.get_license_folder(single_license))

        if has_text(component):
            placeholder = (
                version is not None
                and version.startswith(VERSION_PLACEHOLDER_PREFIX)
                and version.endswith(VERSION_PLACEHOLDER_SUFFIX)
            )
            if version == "*" or artifact.is_true(KEY_WILDCARD_MATCH) or placeholder:
                folder = LicenseMetaData.derive_component_folder_name(component)
            else:
                folder = LicenseMetaData.derive_component_folder_name(component, version)
            _append_unique(component_folders, folder)
            _append_unique(license_references, f"{component}/{version}/{license_name}")
            _append_unique(license_references, f"{component}/*/{license_name}")

        matching = inventory.find_matching_license_meta_data(component, license_name, version)
        if matching is not None:
            for single_license in split_licenses(matching.licenseInEffect, r"[,|]"):
                _append_unique(license_folders, inventory.get_license_folder(single_license))
            licenses_requiring_notice.add(matching.license)
        elif license_name and ("+" in license_name or "," in license_name):
            licenses_requiring_notice.add(license_name)

    @staticmethod
    def _distinct_licenses(license_name: Optional[str]) -> List[str]:
        result = []
        for single_license in split_licenses(license_name, r"[|,+]"):
            for addon in LICENSE_ADDONS:
                single_license = single_license.replace(addon, "")
            single_license = single_license.strip()
            # licenses without version are not backed by a folder
            if "(undefined)" not in single_license:
                _append_unique(result, single_license)
        return result

    def _check_duplicates(self, inventory: Inventory) -> None:
        reported: Set[int] = set()
        for artifact in inventory.artifacts:
            if not has_text(artifact.id) or id(artifact) in reported:
                continue
            duplicate = inventory.find_matching_id(artifact)
            if duplicate is None:
                continue
            checksum = artifact.checksum if has_text(artifact.checksum) else None
            duplicate_checksum = duplicate.checksum if has_text(duplicate.checksum) else None
            if checksum != duplicate_checksum:
                continue
            version = artifact.version if has_text(artifact.version) else None
            duplicate_version = duplicate.version if has_text(duplicate.version) else None
            # different versions are only a duplicate when the checksums are identical
            if version != duplicate_version and checksum is None:
                continue
            self.finding(
                f"Duplicate artifact detected: {artifact.id} / {duplicate.id}.",
                "remove duplicate artifacts from inventory.",
            )
            reported.add(id(duplicate))

    def _check_current(self, inventory: Inventory) -> None:
        reported: Set[int] = set()
        for artifact in inventory.artifacts:
            if not artifact.has_classification(CLASSIFICATION_CURRENT) or id(artifact) in reported:
                continue
            if not has_text(artifact.artifactId):
                continue
            current = inventory.find_current(artifact)
            if current is None:
                continue
            self.finding(
                "Inconsistent classification (at least one and only one with classification 'current' "
                f"expected): {artifact.id}-{artifact.create_string_representation()} / "
                f"{current.id}-{current.create_string_representation()}. "
                "Recommendation: revise artifact classification."
            )
            reported.add(id(current))

    def _check_required_notices(self, inventory: Inventory, licenses_requiring_notice: Set[str]) -> None:
        for artifact in inventory.artifacts:
            artifact.derive_artifact_id()
            if not artifact.is_enabled_for_distribution():
                continue
            if inventory.find_matching_license_meta_data_for(artifact) is not None:
                continue
            if artifact.license in licenses_requiring_notice:
                self.finding(
                    f"Artifact '{artifact.id}', component '{artifact.component}' with license "
                    f"'{artifact.license}' requires a license notice. ",
                    "add license notice to notices in inventory.",
                )

    def _check_license_folders(self, base_dir: str, target_dir: str, expected: List[str]) -> None:
        create = self.get_bool(CREATE_LICENSE_FOLDERS, False)
        delete = self.get_bool(DELETE_LICENSE_FOLDERS, False)

        existing = set(list_subdirectories(base_dir))
        for folder in sorted(existing):
            if folder in expected:
                continue
            if (create and is_empty_folder(target_dir, folder)) or delete:
                remove_folder(base_dir, folder)
                existing.discard(folder)
            else:
                self.finding(
                    f"License folder '{folder}' does not match any artifact license / effective license in inventory.",
                    "remove license folder.",
                )

        for folder in expected:
            if folder in existing:
                continue
            if create:
                if not (Path(base_dir) / folder).exists() and not (Path(target_dir) / folder).exists():
                    create_folder(base_dir, folder)
            else:
                self.finding(f"License folder missing: {folder}", "add license folder.")

        for folder in expected:
            if is_empty_folder(base_dir, folder) and is_empty_folder(target_dir, folder):
                self.finding(
                    f"License folder '{folder}' does not contain any license or notice files.",
                    "add license to the license folder.",
                )

    def _check_component_folders(self, base_dir: str, target_dir: str, expected: List[str]) -> None:
        create = self.get_bool(CREATE_COMPONENT_FOLDERS, False)
        delete = self.get_bool(DELETE_COMPONENT_FOLDERS, False)

        for folder in list_subdirectories(base_dir):
            if folder in expected:
                continue
            if (create and is_empty_folder(base_dir, folder)) or delete:
                remove_folder(base_dir, folder)
            else:
                self.finding(
                    f"Component folder '{folder}' does not match any artifact (not banned, not internal) "
                    "in the inventory.",
                    "remove the folder.",
                )

        for folder in expected:
            if (Path(base_dir) / folder).exists() or (Path(target_dir) / folder).exists():
                continue
            if create:
                create_folder(base_dir, folder)
            else:
                self.finding(f"Component folder '{folder}' does not exist.", "add component specific folder.")

        for folder in expected:
            if is_empty_folder(base_dir, folder) and is_empty_folder(target_dir, folder):
                self.finding(
                    f"Component folder '{folder}' does not contain any license or notice files.",
                    "add component specific license and/or notice to the component folder.",
                )

    def _check_license_meta_data(self, inventory: Inventory, license_references: List[str]) -> None:
        for license_meta_data in inventory.licenseMetaData:
            reference = f"{license_meta_data.component}/{license_meta_data.version}/{license_meta_data.license}"
            if reference not in license_references:
                self.finding(
                    f"License notice '{reference}' not used in inventory.",
                    "remove the license notice from the inventory.",
                )

            if has_text(license_meta_data.sourceCategory):
                source_category = license_meta_data.sourceCategory.strip().lower()
                if source_category in (SOURCE_CATEGORY_EXTENDED, SOURCE_CATEGORY_ADDITIONAL):
                    logger.warning(
                        f"{self.index:04d}: Source category '{license_meta_data.sourceCategory}' deprecated."
                    )
                    self.index += 1
                    self.log_finding("      Proposal: change source category to 'annex' or 'retained'.")
                elif source_category not in (SOURCE_CATEGORY_RETAINED, SOURCE_CATEGORY_ANNEX):
                    self.finding(
                        f"Source category '{license_meta_data.sourceCategory}' not supported.",
                        "change source category to 'annex' or 'retained' or remove the value.",
                    )

            effective_license = license_meta_data.derive_license_in_effect()
            if has_text(effective_license) and "," in effective_license:
                self.finding(
                    f"Effective license of '{license_meta_data.derive_qualifier()}' contains ','.",
                    "replace ',' by '|'.",
                )

    def _check_unique_component_license(self, inventory: Inventory) -> None:
        complete = [a for a in inventory.artifacts if a.component and a.version and a.license]
        for artifact in complete:
            license_name = artifact.license.strip()
            for candidate in complete:
                if (artifact.component, artifact.version) != (candidate.component, candidate.version):
                    continue
                candidate_license = candidate.license.strip()
                if license_name != candidate_license:
                    self.finding(
                        f"Component '{artifact.component}' in version '{artifact.version}' does not have a "
                        f"unique license association: '{license_name}' <> '{candidate_license}'.",
                        "split component.",
                    )

    def _check_version_in_id(self, inventory: Inventory) -> None:
        for artifact in inventory.artifacts:
            version = artifact.version
            if has_text(artifact.groupId) and version is not None and artifact.id is not None:
                if version not in artifact.id:
                    self.finding(
                        "Version information inconsistent. Mismatch between version and artifact file name. "
                        f"Version '{version}' not contained in '{artifact.id}'. ",
                        "fix artifact file name to include correct version or remove the group id in case "
                        "it is not a maven-managed artifact.",
                    )

    def _check_notice(self, license_meta_data: LicenseMetaData) -> None:
        notice = license_meta_data.notice or ""
        qualifier = license_meta_data.derive_qualifier()
        if not has_text(notice):
            self.finding(f"Empty license notice for '{qualifier}'.", "validate/add license notice content.")

        for element in NOTICE_ELEMENTS:
            open_element = f"<{element}>"
            close_element = f"</{element}>"
            if notice.count(open_element) != notice.count(close_element):
                self.log_finding(
                    f"License text '{qualifier}': number of '{open_element}' does not match number of "
                    f"'{close_element}'."
                )
                self.error = True

        if notice.count('"') % 2 != 0:
            self.log_finding(f"License text '{qualifier}': expected even count of character sequence '\"'.")
            self.error = True

        for sequence in SUSPICIOUS_SEQUENCES:
            if sequence in notice:
                self.log_finding(f"License text '{qualifier}': suspicious character sequence '{sequence}'.")
                self.error = True


def create_folder(base_dir: str, name: str) -> None:
    (Path(base_dir) / name).mkdir(parents=True, exist_ok=True)


def remove_folder(base_dir: str, name: str) -> None:
    logger.info(f"Removing folder {Path(base_dir) / name}")
    shutil.rmtree(Path(base_dir) / name, ignore_errors=True)
