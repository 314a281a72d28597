# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pluggy

hookimpl = pluggy.HookimplMarker("inventorykit")
"""Marker to be imported and used in plugins (and for own implementations)"""
