"""Fork factory: turn templates into user-owned journeys."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from trippin.models.journey import (
    CustomOrigin,
    JourneyFork,
    JourneySource,
    JourneyStatus,
    TemplateOrigin,
)
from trippin.models.stop import UserStop

DEFAULT_CUSTOM_TITLE = "Untitled Journey"


def new_fork_id() -> str:
    """Generate a fork id. The prefix keeps it disjoint from template ids."""
    return f"fork-{uuid.uuid4().hex}"


def create_fork(source: JourneySource, *, now: datetime | None = None) -> JourneyFork:
    """Create a new PLANNED fork from a template.

    Every stop is copied by value into an unvisited `UserStop` with no note,
    and the fork starts without moments. The result shares no mutable state
    with `source` or with any other fork of it. Adding the fork to the
    planner is up to the caller.
    """
    return JourneyFork(
        id=new_fork_id(),
        origin=TemplateOrigin(source.id),
        title=source.title,
        location=source.location,
        duration=source.duration,
        image_url=source.image_url,
        stops=[UserStop.from_template(stop) for stop in source.stops],
        moments=[],
        author=source.author,
        status=JourneyStatus.PLANNED,
        cloned_at=now or datetime.now(UTC),
    )


def create_custom_fork(
    initial_title: str, *, now: datetime | None = None
) -> JourneyFork:
    """Create an empty PLANNED journey with no template lineage."""
    title = initial_title.strip() or DEFAULT_CUSTOM_TITLE
    return JourneyFork(
        id=new_fork_id(),
        origin=CustomOrigin(),
        title=title,
        stops=[],
        moments=[],
        status=JourneyStatus.PLANNED,
        cloned_at=now or datetime.now(UTC),
    )
