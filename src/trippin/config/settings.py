"""Configuration and settings persistence."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from trippin.config.paths import get_paths

logger = logging.getLogger(__name__)

DEFAULT_PROXIMITY_THRESHOLD_M = 75.0


def get_settings_path() -> Path:
    """Get the path to the settings file."""
    return get_paths().global_settings


def _positive_float(raw: Any) -> float | None:
    if raw in (None, ""):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


class Settings:
    """Persistent settings for Trippin."""

    _defaults: dict[str, Any] = {
        "strict_invariants": False,
    }

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load settings from disk."""
        path = get_settings_path()
        if path.exists():
            try:
                self._data = json.loads(path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                self._data = {}
        else:
            self._data = {}

    def _save(self) -> None:
        """Save settings to disk."""
        path = get_settings_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            logger.info("Saved settings to %s: %s", path, self._data)
        except OSError as e:
            logger.error("Failed to save settings: %s", e)

    def get(self, key: str) -> Any:
        """Get a setting value, falling back to default."""
        return self._data.get(key, self._defaults.get(key))

    def set(self, key: str, value: Any) -> None:
        """Set a setting value and persist to disk."""
        self._data[key] = value
        self._save()

    @property
    def proximity_threshold_m(self) -> float:
        """Arrival radius for automatic stop advancement, in meters.

        Priority: TRIPPIN_PROXIMITY_M env var > settings > default.
        Invalid or non-positive values are ignored.
        """
        env_value = _positive_float(os.environ.get("TRIPPIN_PROXIMITY_M"))
        if env_value is not None:
            return env_value
        saved = _positive_float(self._data.get("proximity_threshold_m"))
        if saved is not None:
            return saved
        return DEFAULT_PROXIMITY_THRESHOLD_M

    @proximity_threshold_m.setter
    def proximity_threshold_m(self, value: float | None) -> None:
        """Set the arrival radius. None or non-positive restores the default."""
        if value is None or value <= 0:
            self._data.pop("proximity_threshold_m", None)
            self._save()
            return
        self.set("proximity_threshold_m", float(value))

    @property
    def catalog_path(self) -> Path | None:
        """Optional YAML catalog replacing the bundled templates."""
        saved = self._data.get("catalog_path")
        if saved:
            return Path(saved).expanduser().resolve()
        return None

    @catalog_path.setter
    def catalog_path(self, value: str | Path | None) -> None:
        if value is None:
            self._data.pop("catalog_path", None)
            self._save()
            return
        self.set("catalog_path", str(value))

    @property
    def data_directory(self) -> Path:
        """Directory holding the journey collections.

        Returns the configured directory, or defaults to the workspace
        .trippin/data directory.
        """
        saved = self._data.get("data_directory")
        if saved:
            return Path(saved).expanduser().resolve()
        return get_paths().data_dir

    @data_directory.setter
    def data_directory(self, value: str | Path) -> None:
        self.set("data_directory", str(value))

    @property
    def strict_invariants(self) -> bool:
        """Raise instead of repairing when stored collections overlap."""
        return bool(self.get("strict_invariants"))

    @strict_invariants.setter
    def strict_invariants(self, value: bool) -> None:
        self.set("strict_invariants", bool(value))


# Global settings instance
settings = Settings()
