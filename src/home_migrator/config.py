"""
Settings loader for the home folder migrator.

Settings come from a JSON document (appsettings.json by default) whose keys
are matched case-insensitively:

    {
        "SourcePath": "\\\\fs01\\Home",
        "RProfilesPath": "\\\\fs01\\RProfiles",
        "DestinationPath": "\\\\fs02\\Users",
        "CsvFilePath": "C:\\Migration\\users.csv",
        "UserHomeFolderName": "Home",
        "TrimToken": "_sa",
        "MaxRetries": 3
    }

Unknown keys are ignored and null values fall back to the defaults.
"""

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "appsettings.json"
DEFAULT_MAX_RETRIES = 3

# Lower-cased JSON key -> dataclass field
_STRING_FIELDS = {
    "sourcepath": "source_path",
    "rprofilespath": "rprofiles_path",
    "destinationpath": "destination_path",
    "csvfilepath": "csv_file_path",
    "userhomefoldername": "user_home_folder_name",
    "trimtoken": "trim_token",
}
_INT_FIELDS = {
    "maxretries": "max_retries",
}


class SettingsError(Exception):
    """Raised when the settings file cannot be read or is invalid."""
    pass


@dataclass(frozen=True)
class MigrationSettings:
    """Settings for a single migration run."""
    source_path: str = ""
    rprofiles_path: str = ""
    destination_path: str = ""
    csv_file_path: str = ""
    user_home_folder_name: str = ""
    max_retries: int = DEFAULT_MAX_RETRIES
    trim_token: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationSettings":
        """
        Build settings from a parsed JSON object.

        Args:
            data: Mapping of JSON keys to values (keys are case-insensitive)

        Returns:
            MigrationSettings instance

        Raises:
            SettingsError: If a known field has the wrong type
        """
        values: Dict[str, Any] = {}

        for key, value in data.items():
            lowered = str(key).lower()

            if lowered in _STRING_FIELDS:
                if value is None:
                    continue
                if not isinstance(value, str):
                    raise SettingsError(
                        f"Setting '{key}' must be a string, got {type(value).__name__}"
                    )
                values[_STRING_FIELDS[lowered]] = value

            elif lowered in _INT_FIELDS:
                if value is None:
                    continue
                # bool is a subclass of int; reject it explicitly
                if isinstance(value, bool) or not isinstance(value, int):
                    raise SettingsError(
                        f"Setting '{key}' must be an integer, got {type(value).__name__}"
                    )
                values[_INT_FIELDS[lowered]] = value

            else:
                logger.debug(f"Ignoring unknown setting: {key}")

        return cls(**values)


def get_base_directory() -> Path:
    """
    Directory the default settings file is resolved against.

    For a PyInstaller bundle this is the folder holding the executable,
    otherwise the current working directory.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path.cwd()


def default_settings_path() -> Path:
    """Default location of appsettings.json."""
    return get_base_directory() / SETTINGS_FILE_NAME


def load_settings(settings_path: Union[str, Path]) -> MigrationSettings:
    """
    Load migration settings from a JSON file.

    Args:
        settings_path: Path to the JSON settings file

    Returns:
        MigrationSettings instance

    Raises:
        SettingsError: If the file is missing, unreadable or not valid settings
    """
    settings_path = Path(settings_path)

    logger.info(f"Loading settings from: {settings_path}")

    try:
        with open(settings_path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except OSError as e:
        raise SettingsError(f"Cannot read settings file {settings_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid JSON in settings file {settings_path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(
            f"Settings file {settings_path} must contain a JSON object"
        )

    return MigrationSettings.from_dict(data)
