# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("inventorykit")
except PackageNotFoundError:
    __version__ = ""

__all__ = ["__version__"]
