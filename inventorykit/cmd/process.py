# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import sys

import click
from loguru import logger

from inventorykit.cmd.common import (
    collect_properties,
    input_format_option,
    output_format_option,
    property_options,
    read_inventory,
    write_inventory,
)
from inventorykit.processors.inherit import INPUT_INVENTORY, InheritInventoryProcessor
from inventorykit.processors.maven_central import MavenCentralGroupIdProcessor, MavenCentralVersionProcessor
from inventorykit.processors.validate import ValidateInventoryProcessor


def _run_and_write(processor_class, inventory_path, inventory_outfile, properties, input_format, output_format):
    inventory = read_inventory(inventory_path, input_format)
    processor_class(properties).process(inventory)
    write_inventory(inventory, inventory_outfile, output_format)


@click.command("inherit")
@click.argument("inventory", type=click.Path(exists=True), required=True)
@click.argument("parent_inventory", type=click.Path(exists=True), required=True)
@click.argument("inventory_outfile", envvar="INVENTORY_OUTPUT", type=click.File("w"), required=True)
@input_format_option
@output_format_option
def inherit(inventory, parent_inventory, inventory_outfile, input_format, output_format):
    """Add the artifacts and license notices of PARENT_INVENTORY missing in INVENTORY."""
    _run_and_write(
        InheritInventoryProcessor,
        inventory,
        inventory_outfile,
        {INPUT_INVENTORY: parent_inventory},
        input_format,
        output_format,
    )


@click.command("validate")
@click.argument("inventory", type=click.Path(exists=True), required=True)
@property_options
@input_format_option
def validate(inventory, property_values, properties_file, input_format):
    """Validate INVENTORY and the license / component folders configured by properties."""
    properties = collect_properties(property_values, properties_file)
    try:
        ValidateInventoryProcessor(properties).process(read_inventory(inventory, input_format))
    except (ValueError, RuntimeError) as e:
        logger.error(str(e))
        sys.exit(1)
    click.echo("Validation completed.")


@click.command("maven-groupid")
@click.argument("inventory", type=click.Path(exists=True), required=True)
@click.argument("inventory_outfile", envvar="INVENTORY_OUTPUT", type=click.File("w"), required=True)
@property_options
@input_format_option
@output_format_option
# pylint: disable-next=too-many-positional-arguments
def maven_groupid(inventory, inventory_outfile, property_values, properties_file, input_format, output_format):
    """Complete missing groupIds in INVENTORY using Maven Central."""
    properties = collect_properties(property_values, properties_file)
    _run_and_write(MavenCentralGroupIdProcessor, inventory, inventory_outfile, properties, input_format, output_format)


@click.command("maven-version")
@click.argument("inventory", type=click.Path(exists=True), required=True)
@click.argument("inventory_outfile", envvar="INVENTORY_OUTPUT", type=click.File("w"), required=True)
@property_options
@input_format_option
@output_format_option
# pylint: disable-next=too-many-positional-arguments
def maven_version(inventory, inventory_outfile, property_values, properties_file, input_format, output_format):
    """Record the latest Maven Central version of the artifacts in INVENTORY."""
    properties = collect_properties(property_values, properties_file)
    _run_and_write(MavenCentralVersionProcessor, inventory, inventory_outfile, properties, input_format, output_format)
