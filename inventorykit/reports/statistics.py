# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import json
from typing import Callable, Dict, List, Optional

from loguru import logger

from inventorykit.model import Inventory, VulnerabilityMetaData
from inventorykit.model._vulnerability import (
    KEY_CVSS_MODIFIED_SEVERITY_V2,
    KEY_CVSS_MODIFIED_SEVERITY_V3,
    KEY_CVSS_UNMODIFIED_SEVERITY_V2,
    KEY_CVSS_UNMODIFIED_SEVERITY_V3,
    STATUS_IN_REVIEW,
)
from inventorykit.utils.identifiers import has_text

DEFAULT_SEVERITIES = ("critical", "high", "medium", "low")
UNSET = "unset"
TOTAL = "total"
ASSESSED = "% assessed"

STATUS_ORDER = (
    "reviewed",
    "affected",
    "potentially affected",
    "potential vulnerability",
    "in review",
    "not affected",
    "not applicable",
    "insignificant",
    "void",
)


def map_status_default(status: str) -> str:
    if status in ("applicable", "potential vulnerability"):
        return "reviewed"
    return status


def map_status_abstracted(status: str) -> str:
    if status in ("applicable", "reviewed", "potential vulnerability"):
        return "affected"
    if status in ("not applicable", "void", "insignificant"):
        return "not affected"
    if status == "in review":
        return "potentially affected"
    return status


STATUS_MAPPERS: Dict[str, Callable[[str], str]] = {
    "default": map_status_default,
    "abstracted": map_status_abstracted,
}


def get_severity(vmd: VulnerabilityMetaData, use_modified_severity: bool) -> str:
    keys = [KEY_CVSS_UNMODIFIED_SEVERITY_V3, KEY_CVSS_UNMODIFIED_SEVERITY_V2]
    if use_modified_severity:
        keys = [KEY_CVSS_MODIFIED_SEVERITY_V3, KEY_CVSS_UNMODIFIED_SEVERITY_V3,
                KEY_CVSS_MODIFIED_SEVERITY_V2, KEY_CVSS_UNMODIFIED_SEVERITY_V2]
    for key in keys:
        value = vmd.get(key)
        if has_text(value):
            return value.strip().lower()
    return UNSET


def get_status(vmd: VulnerabilityMetaData) -> str:
    if has_text(vmd.status):
        return vmd.status.strip().lower()
    return STATUS_IN_REVIEW


def has_advisory_source(vmd: VulnerabilityMetaData, source: str) -> bool:
    """Check the JSON `Advisories` list of a vulnerability for an entry from source."""
    if not has_text(vmd.advisories):
        return False
    try:
        advisories = json.loads(vmd.advisories)
    except json.JSONDecodeError:
        logger.warning(f"Cannot parse advisories of {vmd.name}")
        return False
    return any(isinstance(a, dict) and a.get("source") == source for a in advisories)


def _capitalize_words(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in value.split(" "))


class StatisticsOverviewTable:
    """Vulnerability counts per severity (rows) and status (columns).

    Each row also carries a `total` column and the share of assessed vulnerabilities
    (`% assessed`).
    """

    def __init__(self):
        self.counts: Dict[str, Dict[str, int]] = {}

    def add_severity(self, severity: str) -> None:
        self.counts.setdefault(severity.lower(), {})

    def add_status(self, status: str) -> None:
        for row in self.counts.values():
            row.setdefault(status.lower(), 0)

    def increment(self, severity: str, status: str) -> None:
        self.add_severity(severity)
        self.add_status(status)
        self.counts[severity.lower()][status.lower()] += 1

    def get_headers(self) -> List[str]:
        columns = next(iter(self.counts.values()), {})
        return [_capitalize_words(h) for h in ["severity", *columns.keys()]]

    def get_severity_categories(self) -> List[str]:
        return [_capitalize_words(s) for s in self.counts]

    def get_counts_for_severity(self, severity: str) -> List[int]:
        return list(self.counts[severity.lower()].values())

    def get_counts_for_status(self, status: str) -> List[int]:
        return [row.get(status.lower(), 0) for row in self.counts.values()]

    def is_empty(self) -> bool:
        """Empty when every count, ignoring the `% assessed` column, is zero."""
        return all(value == 0 for row in self.counts.values() for key, value in row.items() if key != ASSESSED)

    @classmethod
    def from_inventory(
        cls,
        inventory: Inventory,
        use_modified_severity: bool = False,
        context: Optional[str] = None,
        advisory_source: Optional[str] = None,
        status_mapper: str = "default",
    ) -> "StatisticsOverviewTable":
        """Build the table from the vulnerability metadata of an inventory.

        Args:
            inventory (Inventory): Inventory holding the vulnerability metadata.
            use_modified_severity (bool): Prefer the modified CVSS severities.
            context (Optional[str]): Vulnerability metadata context; all contexts when None.
            advisory_source (Optional[str]): Only count vulnerabilities with an advisory
                from this source.
            status_mapper (str): `default` or `abstracted` status columns.

        Returns:
            StatisticsOverviewTable: The populated table.
        """
        mapper = STATUS_MAPPERS[status_mapper]
        if context is None:
            vmds = [vmd for entries in inventory.vulnerabilityMetaData.values() for vmd in entries]
        else:
            vmds = list(inventory.vulnerabilityMetaData.get(context, []))
        if advisory_source:
            vmds = [vmd for vmd in vmds if has_advisory_source(vmd, advisory_source)]

        table = cls()
        for severity in DEFAULT_SEVERITIES:
            table.add_severity(severity)
        for vmd in vmds:
            table.add_severity(get_severity(vmd, use_modified_severity))

        # unknown statuses go first, the known ones in review order
        statuses = {mapper(get_status(vmd)) for vmd in vmds}
        for status in sorted(statuses, key=lambda s: STATUS_ORDER.index(s) if s in STATUS_ORDER else -1):
            table.add_status(status)

        for vmd in vmds:
            table.increment(get_severity(vmd, use_modified_severity), mapper(get_status(vmd)))

        for row in table.counts.values():
            row[TOTAL] = sum(row.values())
            if status_mapper == "abstracted":
                potentially_affected = row.get("potentially affected", 0)
                assessed = row.get("affected", 0) + row.get("not affected", 0)
                if potentially_affected == 0:
                    row[ASSESSED] = 100
                else:
                    row[ASSESSED] = int(assessed * 100 / (assessed + potentially_affected))
            else:
                in_review = row.get("in review", 0)
                insignificant = row.get("insignificant", 0)
                if in_review == 0 and insignificant == 0:
                    row[ASSESSED] = 100
                else:
                    not_applicable = 0 if use_modified_severity else row.get("not applicable", 0)
                    assessed = row.get("reviewed", 0) + not_applicable + row.get("void", 0)
                    row[ASSESSED] = int(assessed * 100 / (assessed + in_review + insignificant))

        unset_row = table.counts.get(UNSET)
        if unset_row is not None and all(v == 0 for k, v in unset_row.items() if k != ASSESSED):
            del table.counts[UNSET]

        logger.debug(f"Generated overview table for [{len(vmds)}] vulnerabilities:\n{table}")
        return table

    def __str__(self) -> str:
        rows = [self.get_headers()]
        for severity in self.counts:
            rows.append([_capitalize_words(severity), *map(str, self.get_counts_for_severity(severity))])
        widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]

        lines = []
        for index, row in enumerate(rows):
            lines.append(" │ ".join(cell.rjust(width) for cell, width in zip(row, widths)))
            if index == 0:
                lines.append("─┼─".join("─" * width for width in widths))
        return "\n".join(lines) + "\n"
