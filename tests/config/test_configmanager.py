# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import os
import platform
from pathlib import Path

import pytest

from inventorykit.configmanager import ConfigManager


@pytest.fixture(name="config_manager")
def fixture_config_manager(tmp_path):
    config_manager = ConfigManager(app_name="testapp", config_dir=tmp_path)
    yield config_manager
    ConfigManager.delete_instance("testapp")


def test_singleton(config_manager):
    assert ConfigManager(app_name="testapp") is config_manager


def test_set_and_get(config_manager):
    config_manager.set("scan", "extract_prefix", "custom-")
    assert config_manager.get("scan", "extract_prefix") == "custom-"
    assert config_manager["scan"]["extract_prefix"] == "custom-"
    assert config_manager.config_file_path.exists()


def test_defaults(config_manager):
    """Built-in defaults apply when the config file does not define a setting."""
    assert config_manager.get("core", "output_format") == "inventorykit.output.json_writer"
    assert config_manager.get("maven_central", "search_url").startswith("https://search.maven.org")
    assert config_manager.get("Settings", "theme") is None
    assert config_manager.get("Settings", "theme", fallback="light") == "light"
    assert config_manager["Settings"] is None


def test_get_int(config_manager):
    assert config_manager.get_int("maven_central", "timeout", 1) == 10
    config_manager.set("maven_central", "retries", "three")
    assert config_manager.get_int("maven_central", "retries", 5) == 5
    config_manager.set("maven_central", "retries", "4")
    assert config_manager.get_int("maven_central", "retries", 5) == 4


def test_preserve_comments(config_manager):
    config_manager.set("core", "output_format", "csv")
    with open(config_manager.config_file_path, "a") as configfile:
        configfile.write("\n# This is a comment\n")
    config_manager._load_config()  # pylint: disable=protected-access
    assert config_manager.get("core", "output_format") == "csv"

    config_manager.set("core", "input_format", "json")
    with open(config_manager.config_file_path, "r") as configfile:
        assert "# This is a comment" in configfile.read()


@pytest.mark.skipif(platform.system() == "Windows", reason="Test specific to Unix-like platforms")
def test_unix_config_path():
    config_manager = ConfigManager(app_name="testapp")
    config_path = config_manager._get_config_file_path()  # pylint: disable=protected-access
    expected_config_dir = Path(os.getenv("XDG_CONFIG_HOME", str(Path("~/.config").expanduser())))
    assert expected_config_dir in config_path.parents
    assert config_path.parts[-2:] == ("testapp", "config.toml")
    ConfigManager.delete_instance("testapp")


def test_multiple_instances(tmp_path):
    config_manager1 = ConfigManager(app_name="testapp1", config_dir=tmp_path)
    config_manager2 = ConfigManager(app_name="testapp2", config_dir=tmp_path)
    config_manager1.set("core", "output_format", "json")
    config_manager2.set("core", "output_format", "csv")
    assert config_manager1.get("core", "output_format") == "json"
    assert config_manager2.get("core", "output_format") == "csv"
    assert config_manager1.config_file_path != config_manager2.config_file_path
    ConfigManager.delete_instance("testapp1")
    ConfigManager.delete_instance("testapp2")
