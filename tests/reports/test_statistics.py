# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pytest

from inventorykit.model import Inventory, VulnerabilityMetaData
from inventorykit.reports.statistics import StatisticsOverviewTable, has_advisory_source


@pytest.fixture(name="inventory")
def fixture_inventory():
    return Inventory(
        vulnerabilityMetaData={
            "default": [
                VulnerabilityMetaData(
                    name="CVE-1", cvssUnmodifiedSeverityV3="High", cvssModifiedSeverityV3="low", status="reviewed"
                ),
                VulnerabilityMetaData(name="CVE-2", cvssUnmodifiedSeverityV3="high"),
                VulnerabilityMetaData(name="CVE-3", cvssUnmodifiedSeverityV2="Critical", status="applicable"),
                VulnerabilityMetaData(name="CVE-4", status="void"),
            ],
            "other": [
                VulnerabilityMetaData(
                    name="CVE-5",
                    cvssUnmodifiedSeverityV3="medium",
                    advisories='[{"source": "CERT-FR", "id": "A-1"}]',
                ),
            ],
        }
    )


def test_default_table(inventory):
    table = StatisticsOverviewTable.from_inventory(inventory, context="default")

    assert table.get_headers() == ["Severity", "Reviewed", "In Review", "Void", "Total", "% Assessed"]
    assert table.get_severity_categories() == ["Critical", "High", "Medium", "Low", "Unset"]
    assert table.get_counts_for_severity("high") == [1, 1, 0, 2, 50]
    assert table.get_counts_for_severity("critical") == [1, 0, 0, 1, 100]
    assert table.get_counts_for_status("reviewed") == [1, 1, 0, 0, 0]
    assert not table.is_empty()


def test_modified_severity(inventory):
    table = StatisticsOverviewTable.from_inventory(inventory, use_modified_severity=True, context="default")
    assert table.get_counts_for_severity("low") == [1, 0, 0, 1, 100]
    assert table.get_counts_for_severity("high") == [0, 1, 0, 1, 0]


def test_abstracted_status(inventory):
    table = StatisticsOverviewTable.from_inventory(inventory, context="default", status_mapper="abstracted")
    assert table.get_headers() == [
        "Severity",
        "Affected",
        "Potentially Affected",
        "Not Affected",
        "Total",
        "% Assessed",
    ]
    assert table.get_counts_for_severity("high") == [1, 1, 0, 2, 50]


def test_all_contexts_and_advisory_source(inventory):
    table = StatisticsOverviewTable.from_inventory(inventory)
    assert sum(table.get_counts_for_status("total")) == 5

    table = StatisticsOverviewTable.from_inventory(inventory, advisory_source="CERT-FR")
    assert table.get_counts_for_status("total") == [0, 0, 1, 0]
    assert "Unset" not in table.get_severity_categories()


def test_empty_inventory():
    table = StatisticsOverviewTable.from_inventory(Inventory())
    assert table.is_empty()
    lines = str(table).splitlines()
    assert lines[0] == "Severity │ Total │ % Assessed"
    assert lines[2] == "Critical │     0 │        100"


def test_has_advisory_source():
    assert has_advisory_source(VulnerabilityMetaData(advisories='[{"source": "GHSA"}]'), "GHSA")
    assert not has_advisory_source(VulnerabilityMetaData(advisories="not json"), "GHSA")
    assert not has_advisory_source(VulnerabilityMetaData(), "GHSA")
