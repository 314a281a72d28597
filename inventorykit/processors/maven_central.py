# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import re
import time
from typing import Dict, List, Optional
from xml.etree.ElementTree import Element

import defusedxml.ElementTree
import requests
from loguru import logger
from requests.exceptions import RequestException

from inventorykit.configmanager import ConfigManager
from inventorykit.model import Artifact, Inventory
from inventorykit.processors._base import InventoryProcessor, split_regex_list
from inventorykit.utils.identifiers import has_text

ARTIFACTID_EXCLUDE_PATTERNS = "artifactid.exclude.patterns"
GROUPID_EXCLUDE_PATTERNS = "groupid.exclude.patterns"
OVERWRITE_EXISTING_VERSION = "overwrite.existing.version"
SEARCH_URL = "search.url"

NOT_AVAILABLE = "n.a."


class MavenCentralClient:
    """Query the Maven Central solr search API and return the parsed XML response.

    Args:
        search_url (Optional[str]): Endpoint of the search; defaults to the
            `maven_central.search_url` setting.
        timeout (Optional[int]): Timeout in seconds for each request.
        retries (Optional[int]): Number of attempts per query.
    """

    def __init__(
        self,
        search_url: Optional[str] = None,
        timeout: Optional[int] = None,
        retries: Optional[int] = None,
    ):
        config = ConfigManager()
        self.search_url = search_url or config.get("maven_central", "search_url")
        self.timeout = timeout if timeout is not None else config.get_int("maven_central", "timeout", 10)
        self.retries = retries if retries is not None else config.get_int("maven_central", "retries", 2)
        self.cache: Dict[str, Optional[Element]] = {}

    def query(self, query: str, core: Optional[str] = None) -> Optional[Element]:
        """Run a solr query.

        Returns:
            Optional[Element]: The `<response>` root element, or None if the request failed
            or the response is not well-formed XML.
        """
        params = {"q": query, "wt": "xml"}
        if core:
            params["core"] = core
        cache_key = f"{core}:{query}"
        if cache_key in self.cache:
            return self.cache[cache_key]

        logger.info(f"Querying: {self.search_url} {query}")
        content = self._get(params)
        root = None
        if content is not None:
            try:
                root = defusedxml.ElementTree.fromstring(content)
            except defusedxml.ElementTree.ParseError as e:
                logger.error(f"Cannot parse response for query {query}: {e}")
        self.cache[cache_key] = root
        return root

    def _get(self, params: Dict[str, str]) -> Optional[str]:
        attempt = 0
        while attempt < self.retries:
            try:
                response = requests.get(self.search_url, params=params, timeout=self.timeout)
                if response.status_code == 200:
                    return response.text
                logger.debug(f"Unexpected status code {response.status_code} for {params}")
            except RequestException as e:
                logger.warning(f"Attempt {attempt + 1} - Error querying {self.search_url}: {e}")
            attempt += 1
            if attempt < self.retries:
                time.sleep(2**attempt)
        return None


def _matches_any(patterns: List[str], value: str) -> bool:
    return any(re.fullmatch(pattern, value) for pattern in patterns)


def parse_group_ids(root: Element) -> List[str]:
    return [node.text or "" for node in root.findall("./result/doc/str[@name='g']")]


def parse_latest_version_by_timestamp(root: Element) -> Optional[str]:
    """The version of the most recently published doc of a `gav` search."""
    versions = {}
    for doc in root.findall("./result/doc"):
        version = doc.find("str[@name='v']")
        timestamp = doc.find("long[@name='timestamp']")
        if version is None or timestamp is None:
            continue
        # equal timestamps are ordered by version
        versions[(int(timestamp.text or 0), version.text or "")] = version.text
    if not versions:
        return None
    return versions[max(versions)]


def parse_latest_version_field(root: Element) -> Optional[str]:
    result = root.find("./result")
    if result is None or result.get("numFound") != "1":
        return None
    node = result.find("./doc/str[@name='latestVersion']")
    return node.text if node is not None else None


class MavenCentralGroupIdProcessor(InventoryProcessor):
    """Look up the groupId of artifacts that were identified by file name only.

    An artifact is only updated if Maven Central knows exactly one groupId for its
    artifactId and version. Ambiguous results are logged and skipped.
    """

    def __init__(self, properties: Optional[Dict[str, str]] = None, client: Optional[MavenCentralClient] = None):
        super().__init__(properties)
        self.client = client or MavenCentralClient(search_url=self.get(SEARCH_URL))

    def process(self, inventory: Inventory) -> None:
        artifact_id_filters = split_regex_list(self.get(ARTIFACTID_EXCLUDE_PATTERNS, ""))
        for artifact in inventory.artifacts:
            artifact_id = artifact.id
            if not has_text(artifact_id) or has_text(artifact.groupId) or " " in artifact_id:
                continue
            if _matches_any(artifact_id_filters, artifact_id):
                continue
            self.update_group_id(artifact)

    def update_group_id(self, artifact: Artifact) -> None:
        version = artifact.version
        if not has_text(version):
            version = artifact.derive_version_from_id()
        if not has_text(version):
            return
        artifact_id = Artifact.extract_artifact_id(artifact.id, version)
        if not has_text(artifact_id):
            return

        root = self.client.query(f'a:"{artifact_id}" AND v:"{version.replace(" ", "")}"')
        if root is None:
            logger.error(f"Cannot query group id for {artifact.id}.")
            return

        group_ids = parse_group_ids(root)
        if not group_ids:
            return
        if len(group_ids) > 1:
            logger.info(f"Update of groupId skipped. Found groupId ambiguous: {'|'.join(group_ids)}")
            return
        artifact.version = version
        artifact.groupId = group_ids[0]
        artifact.artifactId = None
        artifact.derive_artifact_id()
        logger.info(f"Updated groupId for artifact {artifact.id}: {artifact.groupId}")


class MavenCentralVersionProcessor(InventoryProcessor):
    """Record the latest version published on Maven Central in the Latest Version attribute.

    Artifacts carrying several groupIds ('|'-separated) get one entry per groupId.
    """

    def __init__(self, properties: Optional[Dict[str, str]] = None, client: Optional[MavenCentralClient] = None):
        super().__init__(properties)
        self.client = client or MavenCentralClient(search_url=self.get(SEARCH_URL))

    def process(self, inventory: Inventory) -> None:
        overwrite_version = self.get_bool(OVERWRITE_EXISTING_VERSION, True)
        group_id_filters = split_regex_list(self.get(GROUPID_EXCLUDE_PATTERNS, ""))
        artifact_id_filters = split_regex_list(self.get(ARTIFACTID_EXCLUDE_PATTERNS, ""))

        for artifact in inventory.artifacts:
            if not has_text(artifact.id):
                continue
            if not overwrite_version and has_text(artifact.latestVersion):
                continue
            if has_text(artifact.groupId) and _matches_any(group_id_filters, artifact.groupId):
                continue
            if _matches_any(artifact_id_filters, self._plain_artifact_id(artifact)):
                continue
            self.update_latest_version(artifact)

    @staticmethod
    def _plain_artifact_id(artifact: Artifact) -> str:
        index = artifact.id.find(f"-{artifact.version}")
        return artifact.id[:index] if index != -1 else artifact.id

    def latest_version(self, group_id: str, artifact_id: str) -> str:
        query = f'g:"{group_id}" AND a:"{artifact_id}"'
        by_timestamp = None
        root = self.client.query(query, core="gav")
        if root is not None:
            by_timestamp = parse_latest_version_by_timestamp(root)

        by_field = None
        root = self.client.query(query)
        if root is not None:
            by_field = parse_latest_version_field(root)

        if by_timestamp is None:
            return by_field or NOT_AVAILABLE
        if by_field is not None and by_field != by_timestamp:
            return f"{by_timestamp}|{by_field}"
        return by_timestamp

    def update_latest_version(self, artifact: Artifact) -> None:
        if not has_text(artifact.groupId):
            return
        artifact_id = self._plain_artifact_id(artifact).replace(" ", "-")
        latest_versions = [
            self.latest_version(group_id.replace(" ", ""), artifact_id) for group_id in artifact.groupId.split("|")
        ]
        artifact.latestVersion = "|".join(latest_versions)
        logger.info(f"Latest version: {artifact.latestVersion}")
