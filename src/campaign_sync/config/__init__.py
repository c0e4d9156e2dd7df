"""
Configuration management: YAML loading, environment resolution, folder table.
"""

from campaign_sync.config.folders import (
    DEFAULT_FOLDER_KEY,
    DEFAULT_FOLDERS,
    DriveFolder,
    FolderSelector,
    resolve_folder,
)
from campaign_sync.config.loader import Config, load_config
from campaign_sync.config.resolver import resolve_config

__all__ = [
    "Config",
    "DEFAULT_FOLDERS",
    "DEFAULT_FOLDER_KEY",
    "DriveFolder",
    "FolderSelector",
    "load_config",
    "resolve_config",
    "resolve_folder",
]
