"""Centralized path management for Trippin.

Follows XDG Base Directory Specification:
- Config: $XDG_CONFIG_HOME/trippin (default: ~/.config/trippin)
- Data: $XDG_DATA_HOME/trippin (default: ~/.local/share/trippin)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _xdg_config_home() -> Path:
    """Get XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def _xdg_data_home() -> Path:
    """Get XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


@dataclass
class TrippinPaths:
    """Centralized path management following XDG conventions."""

    workspace: Path  # Current working directory

    # XDG directories (computed once at init)
    _config_home: Path = field(default_factory=_xdg_config_home)
    _data_home: Path = field(default_factory=_xdg_data_home)

    # === WORKSPACE PATHS ===

    @property
    def workspace_config(self) -> Path:
        """Workspace .trippin/ directory."""
        return self.workspace / ".trippin"

    @property
    def data_dir(self) -> Path:
        """Workspace journey storage: .trippin/data/"""
        return self.workspace_config / "data"

    @property
    def debug_log(self) -> Path:
        """Debug log: .trippin/debug.log"""
        return self.workspace_config / "debug.log"

    # === GLOBAL PATHS (XDG compliant) ===

    @property
    def global_config_dir(self) -> Path:
        """Global config: ~/.config/trippin/"""
        return self._config_home / "trippin"

    @property
    def global_settings(self) -> Path:
        """Global settings file: ~/.config/trippin/settings.json"""
        return self.global_config_dir / "settings.json"

    @property
    def global_data_dir(self) -> Path:
        """Global data: ~/.local/share/trippin/"""
        return self._data_home / "trippin"


# Singleton instance
_paths: TrippinPaths | None = None


def get_paths(workspace: Path | None = None) -> TrippinPaths:
    """Get the paths singleton.

    On first call, optionally set the workspace directory.
    Subsequent calls return the same instance.
    """
    global _paths
    if _paths is None:
        _paths = TrippinPaths(workspace=workspace or Path.cwd())
    return _paths


def reset_paths() -> None:
    """Reset paths singleton (for testing)."""
    global _paths
    _paths = None
