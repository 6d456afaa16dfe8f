"""Derived view state: what to display and which mode the UI is in."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from trippin.models.journey import Journey, JourneyFork, JourneyStatus


class ViewMode(Enum):
    """Whether the displayed journey is read-only or editable."""

    INSPECTION = "inspection"
    ACTIVE = "active"
    NONE = "none"


class JourneyMode(Enum):
    """Unified lifecycle mode for renderers."""

    INSPECTION = "inspection"
    PLANNING = "planning"
    NAVIGATION = "navigation"
    COMPLETED = "completed"
    NONE = "none"


@dataclass(frozen=True)
class ViewState:
    """Read-optimized projection of inspection target and active fork.

    `current_entity` is for display only. Mutations always address the
    active fork.
    """

    current_entity: Journey | None
    view_mode: ViewMode
    journey_mode: JourneyMode
    is_read_only: bool
    active_fork: JourneyFork | None
    inspection_target: Journey | None

    @property
    def is_navigating(self) -> bool:
        return self.journey_mode == JourneyMode.NAVIGATION


EMPTY_VIEW_STATE = ViewState(
    current_entity=None,
    view_mode=ViewMode.NONE,
    journey_mode=JourneyMode.NONE,
    is_read_only=False,
    active_fork=None,
    inspection_target=None,
)


def derive_view_mode(
    inspection_target: Journey | None, active_fork: JourneyFork | None
) -> ViewMode:
    if inspection_target is not None:
        return ViewMode.INSPECTION
    if active_fork is not None:
        return ViewMode.ACTIVE
    return ViewMode.NONE


def derive_journey_mode(
    inspection_target: Journey | None, active_fork: JourneyFork | None
) -> JourneyMode:
    if inspection_target is not None:
        return JourneyMode.INSPECTION
    if active_fork is None:
        return JourneyMode.NONE
    match active_fork.status:
        # Completed forks are inspected rather than active; kept for safety.
        case JourneyStatus.COMPLETED:
            return JourneyMode.COMPLETED
        case JourneyStatus.LIVE:
            return JourneyMode.NAVIGATION
        case JourneyStatus.PLANNED:
            return JourneyMode.PLANNING
    return JourneyMode.NONE


def derive_view_state(
    inspection_target: Journey | None, active_fork: JourneyFork | None
) -> ViewState:
    """Compute the full view state. Pure; inspection always wins."""
    if inspection_target is None and active_fork is None:
        return EMPTY_VIEW_STATE
    return ViewState(
        current_entity=(
            inspection_target if inspection_target is not None else active_fork
        ),
        view_mode=derive_view_mode(inspection_target, active_fork),
        journey_mode=derive_journey_mode(inspection_target, active_fork),
        is_read_only=inspection_target is not None,
        active_fork=active_fork,
        inspection_target=inspection_target,
    )
