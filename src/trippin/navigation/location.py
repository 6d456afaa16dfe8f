"""Location fixes and providers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol, Self

import yaml

from trippin.models.stop import Coordinates, coordinates_from

logger = logging.getLogger(__name__)

FixListener = Callable[["LocationFix"], None]


@dataclass(frozen=True)
class LocationFix:
    """Latest known position of the user."""

    coordinates: Coordinates
    heading: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        heading = data.get("heading")
        # YAML already parses ISO timestamps into datetimes
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            coordinates=coordinates_from(data["coordinates"]),
            heading=float(heading) if heading is not None else None,
            timestamp=timestamp or datetime.now(UTC),
        )


class LocationProvider(Protocol):
    """Pushes the latest fix to subscribers at a best-effort cadence."""

    def subscribe(self, listener: FixListener) -> Callable[[], None]: ...


class ReplayLocationProvider:
    """Replays a recorded track, synchronously, to current subscribers."""

    def __init__(self, track: Iterable[LocationFix] = ()) -> None:
        self.track: list[LocationFix] = list(track)
        self._listeners: list[FixListener] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: FixListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def push(self, fix: LocationFix) -> None:
        """Deliver one fix to everyone currently subscribed."""
        for listener in list(self._listeners):
            listener(fix)

    def replay(self) -> int:
        """Push every fix of the track in order. Returns how many were sent."""
        for fix in self.track:
            self.push(fix)
        return len(self.track)

    @classmethod
    def from_yaml(cls, path: Path) -> ReplayLocationProvider:
        """Load a track file: a list of fixes, or a mapping with `fixes`."""
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("fixes", [])
        if not isinstance(data, list):
            raise ValueError(f"Track {path} must be a list of fixes")
        fixes = [LocationFix.from_dict(item) for item in data]
        logger.info("Loaded %d fixes from %s", len(fixes), path)
        return cls(fixes)
