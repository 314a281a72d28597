# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from ._artifact import Artifact
from ._asset import AssetMetaData
from ._filter import PatternArtifactFilter
from ._inventory import Inventory
from ._license import LicenseData, LicenseMetaData
from ._pattern import ComponentPatternData
from ._vulnerability import VulnerabilityMetaData

__all__ = [
    "Artifact",
    "AssetMetaData",
    "ComponentPatternData",
    "Inventory",
    "LicenseData",
    "LicenseMetaData",
    "PatternArtifactFilter",
    "VulnerabilityMetaData",
]
