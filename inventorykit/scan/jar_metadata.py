# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import os
import re
import zipfile
from typing import Dict, List, Set

from loguru import logger

from inventorykit.model import Artifact, AssetMetaData, Inventory
from inventorykit.utils.identifiers import has_text

POM_PROPERTIES_PATTERN = re.compile(r"^META-INF/maven/[^/]+/[^/]+/pom\.properties$")


def parse_properties(content: str) -> Dict[str, str]:
    """Parse the `key=value` lines of a java properties file; comments start with '#' or '!'."""
    properties = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line[0] in "#!":
            continue
        separator = min((i for i in (line.find("="), line.find(":")) if i != -1), default=-1)
        if separator == -1:
            properties[line] = ""
        else:
            properties[line[:separator].strip()] = line[separator + 1 :].strip()
    return properties


def read_pom_properties(jar_file: str) -> List[Dict[str, str]]:
    """Read all `META-INF/maven/*/*/pom.properties` entries of a jar."""
    result = []
    with zipfile.ZipFile(jar_file, "r") as jar:
        for name in sorted(jar.namelist()):
            if POM_PROPERTIES_PATTERN.match(name):
                content = jar.read(name).decode("utf-8", errors="replace")
                result.append(parse_properties(content))
    return result


def _embedded_artifact(properties: Dict[str, str]) -> Artifact:
    artifact_id = properties.get("artifactId")
    version = properties.get("version")
    artifact = Artifact(
        id=f"{artifact_id}-{version}.jar",
        groupId=properties.get("groupId"),
        version=version,
    )
    artifact.artifactId = artifact_id
    return artifact


class JarMetadataProbe:
    """Complete groupId, artifactId and version of scanned jar artifacts from the maven
    metadata packaged inside the jar.

    Args:
        project_dir (str): Folder the artifact projects (paths) are relative to.
        include_embedded (bool): Add artifacts for every pom.properties of a fat jar.
    """

    def __init__(self, project_dir: str, include_embedded: bool = False):
        self.project_dir = project_dir
        self.include_embedded = include_embedded

    def process(self, inventory: Inventory) -> None:
        reported_ids: Set[str] = set()
        for artifact in list(inventory.artifacts):
            if artifact.id is None or not artifact.id.lower().endswith(".jar"):
                continue
            for project in sorted(artifact.get_projects()):
                jar_file = os.path.join(self.project_dir, project)
                if not os.path.isfile(jar_file):
                    continue
                try:
                    pom_properties = read_pom_properties(jar_file)
                except (zipfile.BadZipFile, OSError) as e:
                    logger.error(f"Error while probing '{artifact}': {e}")
                    continue
                self._complete(artifact, pom_properties)
                if self.include_embedded and len(pom_properties) > 1:
                    self._include_embedded(inventory, artifact, pom_properties, reported_ids)
                break

    @staticmethod
    def _complete(artifact: Artifact, pom_properties: List[Dict[str, str]]) -> None:
        if len(pom_properties) != 1 or has_text(artifact.groupId):
            return
        properties = pom_properties[0]
        if not has_text(properties.get("groupId")):
            return
        artifact.groupId = properties.get("groupId")
        if has_text(properties.get("artifactId")):
            artifact.artifactId = properties.get("artifactId")
        if not has_text(artifact.version):
            artifact.version = properties.get("version")
        logger.debug(f"Completed {artifact} with groupId {artifact.groupId}")

    @staticmethod
    def _include_embedded(
        inventory: Inventory,
        artifact: Artifact,
        pom_properties: List[Dict[str, str]],
        reported_ids: Set[str],
    ) -> None:
        asset_id = f"AID-{artifact.id}-{artifact.checksum}"
        if inventory.find_asset_meta_data(asset_id) is None:
            inventory.assetMetaData.append(AssetMetaData(assetId=asset_id))

        for properties in pom_properties:
            embedded = _embedded_artifact(properties)
            if "${" in embedded.id:
                if embedded.id not in reported_ids:
                    logger.warning(
                        f"Skipping embedded artifact without fully qualified artifact id: {embedded.id}"
                    )
                    reported_ids.add(embedded.id)
                continue
            found = inventory.find_artifact(embedded)
            if found is not None:
                found.set(asset_id, "x")
            else:
                embedded.set(asset_id, "x")
                inventory.artifacts.append(embedded)
