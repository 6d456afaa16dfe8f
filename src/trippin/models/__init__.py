"""Data models for Trippin."""

from .forking import create_custom_fork, create_fork, new_fork_id
from .journey import (
    PLANNER_STATUSES,
    VALID_TRANSITIONS,
    CustomOrigin,
    ForkOrigin,
    InvalidTransitionError,
    Journey,
    JourneyFork,
    JourneySource,
    JourneyStatus,
    TemplateOrigin,
)
from .stop import Author, Coordinates, Moment, StopTemplate, UserStop

__all__ = [
    "Author",
    "Coordinates",
    "CustomOrigin",
    "ForkOrigin",
    "InvalidTransitionError",
    "Journey",
    "JourneyFork",
    "JourneySource",
    "JourneyStatus",
    "Moment",
    "PLANNER_STATUSES",
    "StopTemplate",
    "TemplateOrigin",
    "UserStop",
    "VALID_TRANSITIONS",
    "create_custom_fork",
    "create_fork",
    "new_fork_id",
]
