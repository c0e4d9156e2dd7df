"""
Configuration file loading.

Loads ``campaign_sync.yaml`` (plus an optional ``campaign_sync.{env}.yaml``
overlay) on top of built-in defaults and resolves environment placeholders.
"""

import copy
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from campaign_sync.config.folders import DEFAULT_FOLDER_KEY, DriveFolder, folders_from_config
from campaign_sync.config.resolver import is_unresolved, resolve_config
from campaign_sync.exceptions import ConfigurationError

CONFIG_FILENAME = "campaign_sync.yaml"
API_KEY_ENV = "GOOGLE_API_KEY"

DEFAULT_CONFIG: dict[str, Any] = {
    "drive": {
        "api_key": "${GOOGLE_API_KEY}",
        "request_timeout": 30.0,
        "retry": {
            "max_attempts": 3,
            "initial_delay": 0.5,
            "max_delay": 8.0,
            "exponential_base": 2.0,
            "jitter": True,
        },
    },
    "folders": {
        "scheduled_email": {"id": "1jgYwsup7Pd6OaxsQVbrEWbLFRePHKRo9", "name": "Scheduled Email"},
        "processed_lists": {"id": "1cFUWnQDpdLWs47ZMSHiZ8SgF3cX6i5A1", "name": "[00] Processed Lists"},
    },
    "default_folder": DEFAULT_FOLDER_KEY,
    "sync": {
        "max_runtime_ms": 50_000,
        "file_delay": 0.25,
        "persist_batch_size": 1000,
        "batch_delay": 0.05,
    },
    "database": {
        "type": "duckdb",
        "path": "data/campaign_sync.duckdb",
    },
    "logging": {
        "level": "INFO",
        "console_type": "rich",
    },
}


class Config:
    """campaign_sync configuration container with dict-like access."""

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.drive = data.get("drive", {})
        self.sync = data.get("sync", {})
        self.database = data.get("database", {})

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        value = self.data
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def __getitem__(self, key: str) -> Any:
        if "." in key:
            return self.get(key)
        if key in self.data:
            value = self.data[key]
            if isinstance(value, dict):
                return Config(value)
            return value
        raise KeyError(f"Config key '{key}' not found")

    def __contains__(self, key: str) -> bool:
        value = self.data
        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return False
            value = value[k]
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    @property
    def folders(self) -> dict[str, DriveFolder]:
        """Folder table keyed by selector name."""
        return folders_from_config(self.data.get("folders"))

    @property
    def default_folder(self) -> str:
        return self.data.get("default_folder") or DEFAULT_FOLDER_KEY

    @property
    def api_key(self) -> str | None:
        """Drive API key, or None when neither config nor environment provide one."""
        value = self.get("drive.api_key")
        if is_unresolved(value):
            value = os.getenv(API_KEY_ENV)
        return None if is_unresolved(value) else value

    def validate(self) -> None:
        """Validate configuration structure and content."""
        errors = []

        for section in ("drive", "sync", "database", "folders"):
            value = self.data.get(section)
            if value is not None and not isinstance(value, dict):
                errors.append(f"Configuration '{section}' must be a dictionary, got {type(value).__name__}")

        if not errors:
            folders = self.folders
            if self.default_folder not in folders:
                errors.append(
                    f"default_folder '{self.default_folder}' is not one of: {', '.join(sorted(folders))}"
                )

        batch_size = self.get("sync.persist_batch_size")
        if batch_size is not None and int(batch_size) < 1:
            errors.append("sync.persist_batch_size must be >= 1")

        if errors:
            raise ConfigurationError("\n".join(errors))


def load_config(project_path: Path | None = None, env: str | None = None) -> Config:
    """
    Load campaign_sync configuration.

    Missing config files are not an error: the defaults cover a standard
    deployment where only ``GOOGLE_API_KEY`` is set in the environment.

    Args:
        project_path: Directory holding campaign_sync.yaml (default: cwd)
        env: Environment name selecting the campaign_sync.{env}.yaml overlay

    Returns:
        Validated Config with placeholders resolved
    """
    if project_path is None:
        project_path = Path.cwd()

    config_data = copy.deepcopy(DEFAULT_CONFIG)

    base_config_path = project_path / CONFIG_FILENAME
    if base_config_path.is_file():
        _merge_dict(config_data, _read_yaml(base_config_path))

    if env:
        env_config_path = project_path / f"campaign_sync.{env}.yaml"
        if env_config_path.is_file():
            _merge_dict(config_data, _read_yaml(env_config_path))

    config = Config(resolve_config(config_data, env or "dev"))
    config.validate()
    return config


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        if hasattr(e, "problem_mark"):
            mark = e.problem_mark
            raise ConfigurationError(
                f"Error parsing {path.name} at line {mark.line + 1}, column {mark.column + 1}:\n"
                f"  {e}\n"
                f"  File: {path}"
            ) from e
        raise ConfigurationError(f"Error parsing {path.name}: {e}\n  File: {path}") from e
    except PermissionError as e:
        raise ConfigurationError(f"Permission denied reading {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path.name} must contain a mapping, got {type(data).__name__}")
    return data


def _merge_dict(base: dict, override: dict):
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value
