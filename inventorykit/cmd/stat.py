# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import click

from inventorykit.cmd.common import input_format_option, read_inventory
from inventorykit.reports.statistics import StatisticsOverviewTable


@click.command("stat")
@click.argument("inventory", type=click.Path(exists=True), required=True)
@click.option(
    "--modified/--unmodified",
    default=False,
    show_default=True,
    help="Count by modified CVSS severity where available",
)
@click.option(
    "--status_mapper",
    type=click.Choice(["default", "abstracted"]),
    default="default",
    show_default=True,
)
@input_format_option
def stat(inventory, modified, status_mapper, input_format):
    """Print an overview of the content of INVENTORY."""
    data = read_inventory(inventory, input_format)
    vulnerability_count = sum(len(entries) for entries in data.vulnerabilityMetaData.values())
    click.echo(f"Number of artifacts: {len(data.artifacts)}")
    click.echo(f"Number of license notices: {len(data.licenseMetaData)}")
    click.echo(f"Number of component patterns: {len(data.componentPatternData)}")
    click.echo(f"Number of vulnerabilities: {vulnerability_count}")
    table = StatisticsOverviewTable.from_inventory(data, use_modified_severity=modified, status_mapper=status_mapper)
    if not table.is_empty():
        click.echo(str(table))
