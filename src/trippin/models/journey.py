"""Journey models and the fork lifecycle state machine.

A `JourneySource` is an immutable, author-owned template. A `JourneyFork`
is the user's mutable copy with a lifecycle status. The two are distinct
classes and code that needs to tell them apart dispatches on the class,
never on which fields happen to be present.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Self

from trippin.models.stop import Author, Moment, StopTemplate, UserStop


class JourneyStatus(Enum):
    """Lifecycle status of a fork. The single source of truth for lifecycle."""

    PLANNED = "planned"
    LIVE = "live"
    COMPLETED = "completed"


class InvalidTransitionError(Exception):
    """Raised when an invalid status transition is attempted."""

    def __init__(self, current: JourneyStatus, target: JourneyStatus) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid transition from {current.value} to {target.value}"
        )


# Valid status transitions table
VALID_TRANSITIONS: dict[JourneyStatus, set[JourneyStatus]] = {
    JourneyStatus.PLANNED: {JourneyStatus.LIVE, JourneyStatus.COMPLETED},
    JourneyStatus.LIVE: {
        JourneyStatus.PLANNED,  # Stop navigation
        JourneyStatus.COMPLETED,
    },
    # Terminal
    JourneyStatus.COMPLETED: set(),
}


# Statuses that belong in the planner collection
PLANNER_STATUSES: frozenset[JourneyStatus] = frozenset(
    {JourneyStatus.PLANNED, JourneyStatus.LIVE}
)


@dataclass(frozen=True, slots=True)
class JourneySource:
    """Immutable journey template available for discovery and forking."""

    id: str
    title: str
    location: str
    duration: str
    image_url: str
    author: Author
    stops: tuple[StopTemplate, ...] = ()
    moments: tuple[Moment, ...] = ()

    def get_stop(self, stop_id: str) -> StopTemplate | None:
        for stop in self.stops:
            if stop.id == stop_id:
                return stop
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "duration": self.duration,
            "image_url": self.image_url,
            "author": self.author.to_dict(),
            "stops": [stop.to_dict() for stop in self.stops],
            "moments": [moment.to_dict() for moment in self.moments],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            location=data.get("location", ""),
            duration=data.get("duration", ""),
            image_url=data.get("image_url", ""),
            author=Author.from_dict(data["author"]),
            stops=tuple(StopTemplate.from_dict(s) for s in data.get("stops") or ()),
            moments=tuple(Moment.from_dict(m) for m in data.get("moments") or ()),
        )


@dataclass(frozen=True, slots=True)
class TemplateOrigin:
    """Lineage of a fork made from a template."""

    source_id: str


@dataclass(frozen=True, slots=True)
class CustomOrigin:
    """Lineage of a journey the user authored from scratch."""


ForkOrigin = TemplateOrigin | CustomOrigin


@dataclass
class JourneyFork:
    """A user-owned, mutable journey.

    Title, location, duration, cover image and the stop set are editable
    until the fork is completed. The description and moments stay editable
    afterwards.
    """

    id: str
    origin: ForkOrigin
    title: str
    location: str = ""
    duration: str = ""
    image_url: str = ""
    stops: list[UserStop] = field(default_factory=list)
    moments: list[Moment] = field(default_factory=list)
    description: str = ""
    author: Author | None = None
    status: JourneyStatus = JourneyStatus.PLANNED
    cloned_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    status_history: list[dict[str, str]] = field(default_factory=list)

    @property
    def source_journey_id(self) -> str | None:
        """Id of the template this fork was made from, None for custom forks."""
        match self.origin:
            case TemplateOrigin(source_id=source_id):
                return source_id
            case _:
                return None

    @property
    def is_custom(self) -> bool:
        return isinstance(self.origin, CustomOrigin)

    @property
    def is_completed(self) -> bool:
        return self.status == JourneyStatus.COMPLETED

    # --- Stop helpers ---

    def get_stop(self, stop_id: str) -> UserStop | None:
        """Get a stop by ID."""
        for stop in self.stops:
            if stop.id == stop_id:
                return stop
        return None

    def stop_index(self, stop_id: str) -> int | None:
        return next(
            (i for i, stop in enumerate(self.stops) if stop.id == stop_id),
            None,
        )

    def first_unvisited(self) -> UserStop | None:
        """First stop in route order that has not been visited."""
        return next((stop for stop in self.stops if not stop.visited), None)

    def get_moment(self, moment_id: str) -> Moment | None:
        for moment in self.moments:
            if moment.id == moment_id:
                return moment
        return None

    @property
    def visited_count(self) -> int:
        return sum(1 for stop in self.stops if stop.visited)

    @property
    def progress(self) -> float:
        """Fraction of stops visited, 0.0 for a journey without stops."""
        if not self.stops:
            return 0.0
        return self.visited_count / len(self.stops)

    @property
    def all_visited(self) -> bool:
        return bool(self.stops) and all(stop.visited for stop in self.stops)

    # --- Lifecycle ---

    def can_transition(self, target: JourneyStatus) -> bool:
        """Check if transition to target status is valid."""
        return target in VALID_TRANSITIONS.get(self.status, set())

    def transition(
        self,
        target: JourneyStatus,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Move to a new status, recording it in the status history.

        Raises:
            InvalidTransitionError: If the transition is not valid.
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(self.status, target)

        at = now or datetime.now(UTC)
        entry = {"from": self.status.value, "to": target.value, "at": at.isoformat()}
        if reason:
            entry["reason"] = reason
        self.status_history.append(entry)
        self.status = target
        if target == JourneyStatus.COMPLETED:
            self.completed_at = at

    def copy(self) -> JourneyFork:
        """Deep copy, used for snapshots handed to readers."""
        return JourneyFork.from_dict(self.to_dict())

    # --- Serialization ---

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "duration": self.duration,
            "image_url": self.image_url,
            "stops": [stop.to_dict() for stop in self.stops],
            "moments": [moment.to_dict() for moment in self.moments],
            "description": self.description,
            "author": self.author.to_dict() if self.author else None,
            "status": self.status.value,
            "cloned_at": self.cloned_at.isoformat(),
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
            "status_history": self.status_history,
        }
        match self.origin:
            case TemplateOrigin(source_id=source_id):
                data["source_journey_id"] = source_id
            case CustomOrigin():
                data["is_custom"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create from dictionary.

        A record without `source_journey_id` is a custom journey.
        """
        source_id = data.get("source_journey_id")
        origin: ForkOrigin = (
            TemplateOrigin(str(source_id)) if source_id else CustomOrigin()
        )
        author = data.get("author")
        return cls(
            id=str(data["id"]),
            origin=origin,
            title=data.get("title", ""),
            location=data.get("location", ""),
            duration=data.get("duration", ""),
            image_url=data.get("image_url", ""),
            stops=[UserStop.from_dict(s) for s in data.get("stops") or []],
            moments=[Moment.from_dict(m) for m in data.get("moments") or []],
            description=data.get("description") or "",
            author=Author.from_dict(author) if author else None,
            status=JourneyStatus(data.get("status", "planned")),
            cloned_at=datetime.fromisoformat(data["cloned_at"]),
            completed_at=(
                datetime.fromisoformat(data["completed_at"])
                if data.get("completed_at")
                else None
            ),
            status_history=list(data.get("status_history", [])),
        )


# Anything the user can look at. Mutators only ever accept forks.
Journey = JourneySource | JourneyFork
