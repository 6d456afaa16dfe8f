"""Lifecycle guards for journey mutations.

Guards are pure predicates. Each returns a `GuardRejection` describing why
an operation may not proceed, or None when it may. Rejections are recorded
and logged, never raised: UI actions can race with lifecycle transitions
and a late action must not crash the interface.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from trippin.models.journey import (
    Journey,
    JourneyFork,
    JourneySource,
    JourneyStatus,
)

logger = logging.getLogger(__name__)


class RejectionReason(Enum):
    """Why a mutation was refused."""

    NOT_A_FORK = "not_a_fork"
    NOT_ACTIVE = "not_active"
    COMPLETED_LOCKED = "completed_locked"
    INVALID_TRANSITION = "invalid_transition"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    NO_SUCH_STOP = "no_such_stop"
    NO_SUCH_MOMENT = "no_such_moment"
    INVALID_ARGUMENT = "invalid_argument"


@dataclass(frozen=True)
class GuardRejection:
    """Diagnostic record of a refused operation."""

    operation: str
    target_id: str
    reason: RejectionReason
    detail: str = ""
    at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        message = f"{self.operation} rejected for {self.target_id}: {self.reason.value}"
        if self.detail:
            message = f"{message} ({self.detail})"
        return message


# Operations allowed on a completed fork
COMPLETION_EXEMPT: frozenset[str] = frozenset(
    {
        "update_description",
        "add_moment",
        "update_moment",
        "delete_moment",
    }
)

# Operations locked once a fork is completed
LOCKED_WHEN_COMPLETED: frozenset[str] = frozenset(
    {
        "rename",
        "update_location",
        "update_duration",
        "update_cover_image",
        "add_stop",
        "remove_stop",
        "move_stop",
        "reorder_stops",
        "update_note",
        "mark_visited",
        "toggle_visited",
    }
)


def target_id_of(target: Journey | str | None) -> str:
    """Best-effort id for diagnostics."""
    match target:
        case None:
            return "<none>"
        case str():
            return target
        case JourneySource(id=journey_id) | JourneyFork(id=journey_id):
            return journey_id
        case _:
            return repr(target)


def is_fork(journey: object) -> bool:
    """True for user-owned forks, including custom journeys."""
    return isinstance(journey, JourneyFork)


def is_template(journey: object) -> bool:
    return isinstance(journey, JourneySource)


def check_fork_only(operation: str, target: object) -> GuardRejection | None:
    """Only forks may be mutated."""
    if isinstance(target, JourneyFork):
        return None
    kind = "template" if isinstance(target, JourneySource) else type(target).__name__
    return GuardRejection(
        operation, target_id_of(target), RejectionReason.NOT_A_FORK, f"got {kind}"
    )


def check_active(
    operation: str, fork_id: str, active_fork_id: str | None
) -> GuardRejection | None:
    """Only the single active fork may receive active-scoped mutations."""
    if active_fork_id is not None and fork_id == active_fork_id:
        return None
    return GuardRejection(
        operation,
        fork_id,
        RejectionReason.NOT_ACTIVE,
        f"active fork is {active_fork_id or '<none>'}",
    )


def check_completion_field(operation: str, fork: JourneyFork) -> GuardRejection | None:
    """Completed forks accept only description and moment edits."""
    if fork.status != JourneyStatus.COMPLETED or operation in COMPLETION_EXEMPT:
        return None
    if operation in LOCKED_WHEN_COMPLETED:
        detail = "journey is completed"
    else:
        detail = "unlisted operation on a completed journey"
    return GuardRejection(operation, fork.id, RejectionReason.COMPLETED_LOCKED, detail)


def check_transition(
    operation: str, fork: JourneyFork, allowed_from: set[JourneyStatus]
) -> GuardRejection | None:
    """Status transitions are allowed only from the listed statuses."""
    if fork.status in allowed_from:
        return None
    expected = ", ".join(sorted(status.value for status in allowed_from))
    return GuardRejection(
        operation,
        fork.id,
        RejectionReason.INVALID_TRANSITION,
        f"status is {fork.status.value}; expected one of: {expected}",
    )


class DiagnosticLog:
    """Bounded record of guard rejections, newest last."""

    def __init__(self, maxlen: int = 200) -> None:
        self._entries: deque[GuardRejection] = deque(maxlen=maxlen)

    def record(self, rejection: GuardRejection) -> GuardRejection:
        self._entries.append(rejection)
        logger.warning("Guard rejection: %s", rejection)
        return rejection

    @property
    def last(self) -> GuardRejection | None:
        return self._entries[-1] if self._entries else None

    def __iter__(self) -> Iterator[GuardRejection]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
