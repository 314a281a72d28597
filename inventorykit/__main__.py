# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import sys

import click
from loguru import logger

from inventorykit import __version__
from inventorykit.cmd.config import config
from inventorykit.cmd.merge import merge_command
from inventorykit.cmd.process import inherit, maven_groupid, maven_version, validate
from inventorykit.cmd.scan import scan
from inventorykit.cmd.stat import stat


@click.group()
@click.version_option(__version__, "--version", "-v", message="%(version)s")
@click.option(
    "--log-level",
    type=click.Choice(
        ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
        case_sensitive=False,
    ),
    default="INFO",
)
def main(log_level="INFO"):
    # the level of an existing sink cannot be changed; replace the default sink
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())


@click.command("version")
def version():
    """Print version information."""
    click.echo(__version__)


main.add_command(scan)
main.add_command(merge_command)
main.add_command(inherit)
main.add_command(validate)
main.add_command(maven_groupid)
main.add_command(maven_version)
main.add_command(stat)
main.add_command(config)
main.add_command(version)


if __name__ == "__main__":
    main()
