# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import os
import platform
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

import tomlkit

# settings used when the config file does not define them
DEFAULTS: Dict[str, Dict[str, Any]] = {
    "core": {
        "output_format": "inventorykit.output.json_writer",
        "input_format": "inventorykit.input_readers.json_reader",
        "disable_plugins": [],
    },
    "scan": {
        "extract_prefix": "inventorykit-scan-",
    },
    "maven_central": {
        "search_url": "https://search.maven.org/solrsearch/select",
        "timeout": 10,
        "retries": 2,
    },
}


class ConfigManager:
    """Per-user inventorykit settings kept in a TOML file.

    One instance exists per application name. The file is read once; later changes made
    by other processes are not picked up while the program runs.

    Attributes:
        app_name (str): Name of the application, also the name of the config folder.
        config_dir (Optional[Path]): Folder overriding the platform config location.
        config (tomlkit.TOMLDocument): The loaded document, comments and formatting preserved.
        config_file_path (Path): Location of `config.toml`.
    """

    _initialized: bool = False
    _instances: Dict[str, "ConfigManager"] = {}
    _lock = Lock()

    def __new__(
        cls, app_name: str = "inventorykit", config_dir: Optional[Union[str, Path]] = None
    ) -> "ConfigManager":
        with cls._lock:
            if app_name not in cls._instances:
                instance = super(ConfigManager, cls).__new__(cls)
                instance._initialized = False
                cls._instances[app_name] = instance
            return cls._instances[app_name]

    def __init__(
        self, app_name: str = "inventorykit", config_dir: Optional[Union[str, Path]] = None
    ) -> None:
        if self._initialized:
            return
        self._initialized = True

        self.app_name = app_name
        self.config_dir = Path(config_dir) / app_name if config_dir else None
        self.config = tomlkit.document()
        self.config_file_path = self._get_config_file_path()
        self._load_config()

    def _get_config_file_path(self) -> Path:
        if self.config_dir:
            config_dir = Path(self.config_dir)
        elif platform.system() == "Windows":
            config_dir = Path(os.getenv("APPDATA", str(Path("~\\AppData\\Roaming")))) / self.app_name
        else:
            config_dir = Path(os.getenv("XDG_CONFIG_HOME", str(Path("~/.config")))) / self.app_name
        return (config_dir / "config.toml").expanduser()

    def _load_config(self) -> None:
        if self.config_file_path.exists():
            with open(self.config_file_path, "r") as configfile:
                self.config = tomlkit.parse(configfile.read())

    def get(self, section: str, option: str, fallback: Optional[Any] = None) -> Any:
        """Look up a setting.

        Args:
            section (str): Table of the config file, e.g. `core`.
            option (str): Key within the table.
            fallback (Optional[Any]): Returned when neither the file nor the built-in
                defaults define the setting.

        Returns:
            Any: The configured value, the built-in default, or the fallback.
        """
        value = self.config.get(section, {}).get(option)
        if value is not None:
            return value
        return DEFAULTS.get(section, {}).get(option, fallback)

    def get_int(self, section: str, option: str, fallback: int) -> int:
        value = self.get(section, option, fallback)
        try:
            return int(value)
        except (TypeError, ValueError):
            return fallback

    def set(self, section: str, option: str, value: Any) -> None:
        """Store a setting and write the config file."""
        if section not in self.config:
            self.config[section] = tomlkit.table()
        self.config[section][option] = value
        self._save_config()

    def _save_config(self) -> None:
        self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file_path, "w") as configfile:
            configfile.write(tomlkit.dumps(self.config))

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to a whole table; None when the table is absent."""
        if key not in self.config:
            return None
        return self.config[key]

    @classmethod
    def delete_instance(cls, app_name: str) -> None:
        with cls._lock:
            if app_name in cls._instances:
                del cls._instances[app_name]
