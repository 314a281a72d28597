# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Optional, Tuple

import click
from loguru import logger

from inventorykit.cmd.common import input_format_option, output_format_option, read_inventory, write_inventory
from inventorykit.model import Inventory
from inventorykit.scan import DirectoryInventoryScan
from inventorykit.scan.archives import create_extract_dir, delete_extract_dirs


@click.command("scan")
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False), required=True)
@click.argument("inventory_outfile", envvar="INVENTORY_OUTPUT", type=click.File("w"), required=True)
@click.option(
    "--reference",
    "reference_path",
    type=click.Path(exists=True),
    required=False,
    help="Reference inventory (file or folder) with known artifacts and component patterns",
)
@click.option(
    "--scan_dir",
    type=click.Path(file_okay=False),
    required=False,
    help="Working folder for the scan; a temporary folder is used (and removed) when omitted",
)
@click.option("--include", "includes", multiple=True, help="Ant-style pattern of files to scan; may be repeated")
@click.option("--exclude", "excludes", multiple=True, help="Ant-style pattern of files to skip; may be repeated")
@click.option(
    "--implicit_unpack/--no_implicit_unpack",
    default=True,
    show_default=True,
    help="Expand archives that are not known to the reference inventory",
)
@click.option(
    "--include_embedded/--no_include_embedded",
    default=False,
    show_default=True,
    help="Add artifacts for maven metadata embedded in (fat) jar files",
)
@input_format_option
@output_format_option
# pylint: disable-next=too-many-positional-arguments
def scan(
    input_dir: str,
    inventory_outfile,
    reference_path: Optional[str],
    scan_dir: Optional[str],
    includes: Tuple[str, ...],
    excludes: Tuple[str, ...],
    implicit_unpack: bool,
    include_embedded: bool,
    input_format: str,
    output_format: str,
):
    """Scan INPUT_DIR and write the discovered artifacts to INVENTORY_OUTFILE."""
    reference = read_inventory(reference_path, input_format) if reference_path else Inventory()
    temporary = scan_dir is None
    if temporary:
        scan_dir = create_extract_dir()
    try:
        directory_scan = DirectoryInventoryScan(
            input_dir,
            scan_dir,
            list(includes) or None,
            list(excludes) or None,
            reference,
            enable_implicit_unpack=implicit_unpack,
            include_embedded=include_embedded,
        )
        inventory = directory_scan.create_scan_inventory()
    finally:
        if temporary:
            delete_extract_dirs()
    logger.info(f"Scan found {len(inventory.artifacts)} artifacts")
    write_inventory(inventory, inventory_outfile, output_format)
