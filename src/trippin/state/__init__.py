"""Journey ownership, lifecycle guards and derived view state."""

from trippin.state.guards import (
    COMPLETION_EXEMPT,
    LOCKED_WHEN_COMPLETED,
    DiagnosticLog,
    GuardRejection,
    RejectionReason,
    is_fork,
    is_template,
)
from trippin.state.manager import JourneyStateManager, MutationResult, Snapshot
from trippin.state.ownership import (
    COMPLETED_KEY,
    PLANNER_KEY,
    SESSION_KEY,
    InvariantViolationError,
    OwnershipStore,
)
from trippin.state.view import JourneyMode, ViewMode, ViewState, derive_view_state

__all__ = [
    "COMPLETED_KEY",
    "COMPLETION_EXEMPT",
    "DiagnosticLog",
    "GuardRejection",
    "InvariantViolationError",
    "JourneyMode",
    "JourneyStateManager",
    "LOCKED_WHEN_COMPLETED",
    "MutationResult",
    "OwnershipStore",
    "PLANNER_KEY",
    "RejectionReason",
    "SESSION_KEY",
    "Snapshot",
    "ViewMode",
    "ViewState",
    "derive_view_state",
    "is_fork",
    "is_template",
]
