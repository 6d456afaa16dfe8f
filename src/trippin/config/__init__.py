"""Configuration management for Trippin."""
from __future__ import annotations

from trippin.config.paths import TrippinPaths, get_paths, reset_paths
from trippin.config.settings import Settings, get_settings_path, settings

__all__ = [
    "Settings",
    "TrippinPaths",
    "get_paths",
    "get_settings_path",
    "reset_paths",
    "settings",
]
