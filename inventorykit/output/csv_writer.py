# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import csv
import os
from typing import Optional

import inventorykit.plugin
from inventorykit.model import Artifact, Inventory

default_fields = [
    "Id",
    "Component",
    "Version",
    "Group Id",
    "Checksum",
    "License",
    "Classification",
    "Projects",
]


@inventorykit.plugin.hookimpl
def write_inventory(inventory: Inventory, outfile) -> None:
    # equivalent to `excel` dialect, other than lineterminator
    writer = csv.DictWriter(outfile, fieldnames=default_fields, lineterminator=os.linesep)
    writer.writeheader()
    for artifact in inventory.artifacts:
        writer.writerow(artifact_row(artifact))


@inventorykit.plugin.hookimpl
def short_name() -> Optional[str]:
    return "csv"


def artifact_row(artifact: Artifact) -> dict:
    row = {field: artifact.get(field, "") for field in default_fields}
    # projects are a set; keep the column stable between runs
    row["Projects"] = ", ".join(sorted(artifact.get_projects()))
    return row
