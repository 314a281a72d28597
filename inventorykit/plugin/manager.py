# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import sys
from typing import Any, Optional

import pluggy
from loguru import logger

from inventorykit.configmanager import ConfigManager
from inventorykit.plugin import hookspecs


def _register_plugins(pm: pluggy.PluginManager) -> None:
    # pylint: disable=import-outside-toplevel
    from inventorykit.input_readers import json_reader
    from inventorykit.output import csv_writer, json_writer

    for plugin in (json_reader, json_writer, csv_writer):
        pm.register(plugin)


def set_blocked_plugins(pm: pluggy.PluginManager) -> None:
    """Unregister and block the plugins listed in the `core.disable_plugins` setting."""
    for plugin_name in ConfigManager().get("core", "disable_plugins", []):
        if pm.is_blocked(plugin_name):
            continue
        if pm.unregister(name=plugin_name) is None:
            logger.info(f"Disabled plugin '{plugin_name}' not found.")
            continue
        pm.set_blocked(plugin_name)


def get_plugin_manager() -> pluggy.PluginManager:
    pm = pluggy.PluginManager("inventorykit")
    pm.add_hookspecs(hookspecs)
    pm.load_setuptools_entrypoints("inventorykit")
    _register_plugins(pm)
    set_blocked_plugins(pm)
    pm.check_pending()
    return pm


def is_hook_implemented(pm: pluggy.PluginManager, plugin: object, hook_name: str) -> bool:
    hook_callers = pm.get_hookcallers(plugin)
    return any(hook_caller.name == hook_name for hook_caller in hook_callers or [])


def find_io_plugin(pm: pluggy.PluginManager, io_format: str, function_name: str) -> Optional[Any]:
    """Find the reader or writer plugin for a format.

    Args:
        pm (pluggy.PluginManager): The plugin manager instance.
        io_format (str): Registered plugin name (e.g. `inventorykit.output.csv_writer`) or
            its short name (e.g. `csv`).
        function_name (str): The hook the plugin has to implement, `read_inventory` or
            `write_inventory`.

    Returns:
        Optional[Any]: The matching plugin.

    Raises:
        SystemExit: No matching plugin exists; an error is logged first.
    """
    found_plugin = pm.get_plugin(io_format)
    if found_plugin is not None and not hasattr(found_plugin, function_name):
        found_plugin = None

    if found_plugin is None:
        for plugin in pm.get_plugins():
            if not is_hook_implemented(pm, plugin, "short_name"):
                continue
            if plugin.short_name().lower() == io_format.lower() and hasattr(plugin, function_name):
                found_plugin = plugin
                break

    if found_plugin is None:
        logger.error(f'No "{function_name}" plugin for format "{io_format}" found')
        sys.exit(1)

    return found_plugin
