"""Centralized journey state management.

`JourneyStateManager` is the single gateway for every journey mutation. It
owns the ownership store, the active fork pointer and the inspection target,
runs the lifecycle guards, and notifies subscribers with a fresh snapshot
after each successful transition. Guard failures come back as rejected
`MutationResult`s and are recorded in the diagnostic log.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from trippin.models.forking import create_custom_fork, create_fork
from trippin.models.journey import (
    Journey,
    JourneyFork,
    JourneySource,
    JourneyStatus,
)
from trippin.models.stop import Moment, StopTemplate, UserStop
from trippin.state.guards import (
    COMPLETION_EXEMPT,
    DiagnosticLog,
    GuardRejection,
    RejectionReason,
    check_active,
    check_completion_field,
    check_fork_only,
    check_transition,
    target_id_of,
)
from trippin.state.ownership import OwnershipStore
from trippin.state.view import ViewState, derive_view_state

logger = logging.getLogger(__name__)

# What callers may address a mutation to. Templates are accepted only so
# that they can be rejected with a proper diagnostic.
Target = JourneyFork | JourneySource | str


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a guarded operation."""

    operation: str
    fork: JourneyFork | None = None
    rejection: GuardRejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class Snapshot:
    """Committed state handed to subscribers after each transition."""

    view: ViewState
    planner: tuple[JourneyFork, ...]
    completed: tuple[JourneyFork, ...]


Listener = Callable[[Snapshot], None]


class JourneyStateManager:
    """Single gateway for journey lifecycle and edits."""

    def __init__(
        self,
        ownership: OwnershipStore,
        *,
        diagnostics: DiagnosticLog | None = None,
        restore_session: bool = True,
    ) -> None:
        self.ownership = ownership
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._active_fork_id: str | None = None
        self._inspection_target: Journey | None = None
        self._listeners: list[Listener] = []
        self._view: ViewState | None = None
        if restore_session:
            self._restore_session()

    def _restore_session(self) -> None:
        """Restore the active fork, preferring a live fork if one exists."""
        active_id = self.ownership.load_session()
        live = self.ownership.live_forks()
        if live:
            active_id = live[0].id
        if active_id and self.ownership.find_in_planner(active_id) is None:
            logger.info("Stored active fork %s no longer exists", active_id)
            active_id = None
        self._active_fork_id = active_id

    # --- Subscriptions ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> Snapshot:
        return Snapshot(
            view=self.view,
            planner=tuple(self.ownership.planner),
            completed=tuple(self.ownership.completed),
        )

    def _changed(self) -> None:
        """Recompute derived state, then notify every listener."""
        self._view = None
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Journey state listener failed")

    # --- Reads ---

    @property
    def active_fork_id(self) -> str | None:
        return self._active_fork_id

    @property
    def active_fork(self) -> JourneyFork | None:
        if self._active_fork_id is None:
            return None
        return self.ownership.find_in_planner(self._active_fork_id)

    @property
    def inspection_target(self) -> Journey | None:
        return self._inspection_target

    @property
    def view(self) -> ViewState:
        """Derived view state, cached until the next transition."""
        if self._view is None:
            self._view = derive_view_state(self._inspection_target, self.active_fork)
        return self._view

    def find(self, fork_id: str) -> JourneyFork | None:
        return self.ownership.find(fork_id)

    @property
    def templates(self) -> list[JourneySource]:
        return self.ownership.templates

    # --- Guard plumbing ---

    def _reject(
        self,
        operation: str,
        target: Target | None,
        reason: RejectionReason,
        detail: str = "",
    ) -> MutationResult:
        return self._rejected(
            GuardRejection(operation, target_id_of(target), reason, detail)
        )

    def _rejected(self, rejection: GuardRejection) -> MutationResult:
        self.diagnostics.record(rejection)
        return MutationResult(rejection.operation, rejection=rejection)

    def _resolve(self, operation: str, target: Target) -> JourneyFork | GuardRejection:
        """Turn a target into the stored fork it names."""
        match target:
            case JourneyFork(id=fork_id):
                pass
            case str() as fork_id:
                if self.ownership.template(fork_id) is not None:
                    return GuardRejection(
                        operation, fork_id, RejectionReason.NOT_A_FORK, "got template"
                    )
            case _:
                rejection = check_fork_only(operation, target)
                assert rejection is not None
                return rejection

        fork = self.ownership.find(fork_id)
        if fork is None:
            return GuardRejection(operation, fork_id, RejectionReason.NOT_FOUND)
        return fork

    def _guarded(self, operation: str, target: Target) -> JourneyFork | GuardRejection:
        """Resolve and run the fork, completion and single-active guards."""
        fork = self._resolve(operation, target)
        if isinstance(fork, GuardRejection):
            return fork
        if (rejection := check_completion_field(operation, fork)) is not None:
            return rejection
        if fork.is_completed and operation in COMPLETION_EXEMPT:
            # Completed forks are never active; journaling them is allowed.
            return fork
        if (rejection := check_active(operation, fork.id, self._active_fork_id)) is not None:
            return rejection
        return fork

    def _apply(
        self, operation: str, fork_id: str, mutate: Callable[[JourneyFork], None]
    ) -> MutationResult:
        updated = self.ownership.update(fork_id, mutate)
        if updated is None:
            return self._reject(operation, fork_id, RejectionReason.NOT_FOUND)
        if (
            isinstance(self._inspection_target, JourneyFork)
            and self._inspection_target.id == fork_id
        ):
            self._inspection_target = updated.copy()
        logger.debug("%s applied to %s", operation, fork_id)
        self._changed()
        return MutationResult(operation, fork=updated)

    def _edit(
        self,
        operation: str,
        target: Target,
        mutate: Callable[[JourneyFork], None],
        validate: Callable[[JourneyFork], GuardRejection | None] | None = None,
    ) -> MutationResult:
        fork = self._guarded(operation, target)
        if isinstance(fork, GuardRejection):
            return self._rejected(fork)
        if validate is not None and (rejection := validate(fork)) is not None:
            return self._rejected(rejection)
        return self._apply(operation, fork.id, mutate)

    def _set_active(self, fork_id: str | None) -> None:
        self._active_fork_id = fork_id
        self.ownership.save_session(fork_id)

    # --- Creation ---

    def fork(self, source: JourneySource | str) -> MutationResult:
        """Fork a template into the planner."""
        operation = "fork"
        if isinstance(source, str):
            template = self.ownership.template(source)
            if template is None:
                return self._reject(operation, source, RejectionReason.NOT_FOUND)
            source = template
        elif not isinstance(source, JourneySource):
            return self._reject(
                operation, source, RejectionReason.INVALID_ARGUMENT, "only templates fork"
            )

        fork = create_fork(source)
        if not self.ownership.add_to_planner(fork):
            return self._reject(operation, fork.id, RejectionReason.DUPLICATE)
        logger.info("Forked %s into %s", source.id, fork.id)
        self._changed()
        return MutationResult(operation, fork=fork.copy())

    def create_custom(self, title: str) -> MutationResult:
        """Create an empty custom journey in the planner."""
        fork = create_custom_fork(title)
        if not self.ownership.add_to_planner(fork):
            return self._reject("create_custom", fork.id, RejectionReason.DUPLICATE)
        logger.info("Created custom journey %s", fork.id)
        self._changed()
        return MutationResult("create_custom", fork=fork.copy())

    # --- Active fork and inspection ---

    def open(self, target: Target) -> MutationResult:
        """Make a planner fork the active fork and leave inspection.

        A different fork that was live stops navigating, so a live fork is
        always the active one.
        """
        operation = "open"
        fork = self._resolve(operation, target)
        if isinstance(fork, GuardRejection):
            return self._rejected(fork)
        if fork.is_completed:
            return self._reject(
                operation,
                fork.id,
                RejectionReason.COMPLETED_LOCKED,
                "completed journeys open read-only",
            )
        self._stop_other_live(fork.id)
        self._inspection_target = None
        self._set_active(fork.id)
        self._changed()
        return MutationResult(operation, fork=self.ownership.find(fork.id))

    def close(self) -> MutationResult:
        """Clear the active fork, ending navigation if it was live."""
        active_id = self._active_fork_id
        if active_id is not None:
            fork = self.ownership.find_in_planner(active_id)
            if fork is not None and fork.status == JourneyStatus.LIVE:
                self.ownership.update(
                    active_id,
                    lambda f: f.transition(JourneyStatus.PLANNED, reason="closed"),
                )
        self._set_active(None)
        self._changed()
        return MutationResult("close")

    def inspect(self, journey: Journey) -> MutationResult:
        """Preview any journey read-only. Inspection wins over the active fork."""
        if isinstance(journey, JourneyFork):
            stored = self.ownership.find(journey.id)
            if stored is None:
                return self._reject("inspect", journey, RejectionReason.NOT_FOUND)
            self._inspection_target = stored
        elif isinstance(journey, JourneySource):
            self._inspection_target = journey
        else:
            return self._reject("inspect", journey, RejectionReason.INVALID_ARGUMENT)
        self._changed()
        return MutationResult("inspect")

    def inspect_template(self, template_id: str) -> MutationResult:
        template = self.ownership.template(template_id)
        if template is None:
            return self._reject("inspect", template_id, RejectionReason.NOT_FOUND)
        return self.inspect(template)

    def inspect_fork(self, fork_id: str) -> MutationResult:
        """Read-only view of any fork."""
        fork = self.ownership.find(fork_id)
        if fork is None:
            return self._reject("inspect", fork_id, RejectionReason.NOT_FOUND)
        return self.inspect(fork)

    def inspect_completed(self, fork_id: str) -> MutationResult:
        """Open a completed journey from the archive, read-only."""
        fork = self.ownership.find_in_completed(fork_id)
        if fork is None:
            return self._reject(
                "inspect", fork_id, RejectionReason.NOT_FOUND, "not in completed"
            )
        return self.inspect(fork)

    def end_inspection(self) -> MutationResult:
        self._inspection_target = None
        self._changed()
        return MutationResult("end_inspection")

    # --- Lifecycle ---

    def _stop_other_live(self, fork_id: str) -> None:
        for live in self.ownership.live_forks():
            if live.id != fork_id:
                logger.info("Returning %s to planned", live.id)
                self.ownership.update(
                    live.id,
                    lambda f: f.transition(JourneyStatus.PLANNED, reason="superseded"),
                )

    def start(self, target: Target) -> MutationResult:
        """Begin live navigation. Any other live fork goes back to planned."""
        operation = "start"
        fork = self._resolve(operation, target)
        if isinstance(fork, GuardRejection):
            return self._rejected(fork)
        rejection = check_transition(operation, fork, {JourneyStatus.PLANNED})
        if rejection is not None:
            return self._rejected(rejection)

        self._stop_other_live(fork.id)
        updated = self.ownership.update(
            fork.id, lambda f: f.transition(JourneyStatus.LIVE, reason="start")
        )
        self._inspection_target = None
        self._set_active(fork.id)
        logger.info("Started journey %s", fork.id)
        self._changed()
        return MutationResult(operation, fork=updated)

    def stop(self, target: Target) -> MutationResult:
        """Stop live navigation; the fork stays active and planned."""
        operation = "stop"
        fork = self._resolve(operation, target)
        if isinstance(fork, GuardRejection):
            return self._rejected(fork)
        rejection = check_transition(operation, fork, {JourneyStatus.LIVE})
        if rejection is not None:
            return self._rejected(rejection)

        updated = self.ownership.update(
            fork.id, lambda f: f.transition(JourneyStatus.PLANNED, reason="stop")
        )
        logger.info("Stopped journey %s", fork.id)
        self._changed()
        return MutationResult(operation, fork=updated)

    def complete(self, target: Target, *, now: datetime | None = None) -> MutationResult:
        """Complete a planned or live fork and move it to completed."""
        operation = "complete"
        fork = self._resolve(operation, target)
        if isinstance(fork, GuardRejection):
            return self._rejected(fork)
        rejection = check_transition(
            operation, fork, {JourneyStatus.PLANNED, JourneyStatus.LIVE}
        )
        if rejection is not None:
            return self._rejected(rejection)

        completed = self.ownership.move_to_completed(fork.id, now=now)
        if completed is None:
            return self._reject(operation, fork.id, RejectionReason.NOT_FOUND)
        if self._active_fork_id == fork.id:
            self._set_active(None)
        if (
            isinstance(self._inspection_target, JourneyFork)
            and self._inspection_target.id == fork.id
        ):
            self._inspection_target = completed.copy()
        logger.info("Completed journey %s", fork.id)
        self._changed()
        return MutationResult(operation, fork=completed)

    def delete_fork(self, target: Target) -> MutationResult:
        """Delete a fork from whichever collection owns it."""
        operation = "delete_fork"
        fork = self._resolve(operation, target)
        if isinstance(fork, GuardRejection):
            return self._rejected(fork)
        self.ownership.remove(fork.id)
        if self._active_fork_id == fork.id:
            self._set_active(None)
        if (
            isinstance(self._inspection_target, JourneyFork)
            and self._inspection_target.id == fork.id
        ):
            self._inspection_target = None
        self._changed()
        return MutationResult(operation, fork=fork)

    # --- Journey edits ---

    def rename(self, target: Target, title: str) -> MutationResult:
        title = title.strip()

        def validate(fork: JourneyFork) -> GuardRejection | None:
            if not title:
                return GuardRejection(
                    "rename", fork.id, RejectionReason.INVALID_ARGUMENT, "empty title"
                )
            return None

        def mutate(fork: JourneyFork) -> None:
            fork.title = title

        return self._edit("rename", target, mutate, validate)

    def update_location(self, target: Target, location: str) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            fork.location = location.strip()

        return self._edit("update_location", target, mutate)

    def update_duration(self, target: Target, duration: str) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            fork.duration = duration.strip()

        return self._edit("update_duration", target, mutate)

    def update_cover_image(self, target: Target, image_url: str) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            fork.image_url = image_url

        return self._edit("update_cover_image", target, mutate)

    def update_description(self, target: Target, description: str) -> MutationResult:
        """Allowed in every status, including completed."""

        def mutate(fork: JourneyFork) -> None:
            fork.description = description

        return self._edit("update_description", target, mutate)

    # --- Stop edits ---

    def _stop_check(
        self, operation: str, stop_id: str
    ) -> Callable[[JourneyFork], GuardRejection | None]:
        def validate(fork: JourneyFork) -> GuardRejection | None:
            if fork.get_stop(stop_id) is None:
                return GuardRejection(
                    operation, fork.id, RejectionReason.NO_SUCH_STOP, stop_id
                )
            return None

        return validate

    def add_stop(
        self,
        target: Target,
        stop: StopTemplate | UserStop,
        index: int | None = None,
    ) -> MutationResult:
        """Add a stop (copied by value), appended unless an index is given."""
        new_stop = (
            UserStop.from_template(stop)
            if isinstance(stop, StopTemplate)
            else UserStop.from_dict(stop.to_dict())
        )

        def validate(fork: JourneyFork) -> GuardRejection | None:
            if fork.get_stop(new_stop.id) is not None:
                return GuardRejection(
                    "add_stop", fork.id, RejectionReason.DUPLICATE, new_stop.id
                )
            return None

        def mutate(fork: JourneyFork) -> None:
            if index is None:
                fork.stops.append(new_stop)
            else:
                fork.stops.insert(max(0, index), new_stop)

        return self._edit("add_stop", target, mutate, validate)

    def remove_stop(self, target: Target, stop_id: str) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            fork.stops = [stop for stop in fork.stops if stop.id != stop_id]

        return self._edit(
            "remove_stop", target, mutate, self._stop_check("remove_stop", stop_id)
        )

    def move_stop(self, target: Target, index: int, direction: str) -> MutationResult:
        """Swap the stop at `index` with its neighbour ("up" or "down")."""
        operation = "move_stop"
        offset = {"up": -1, "down": 1}.get(direction)

        def validate(fork: JourneyFork) -> GuardRejection | None:
            if offset is None:
                return GuardRejection(
                    operation,
                    fork.id,
                    RejectionReason.INVALID_ARGUMENT,
                    f"direction {direction!r}",
                )
            if not (0 <= index < len(fork.stops) and 0 <= index + offset < len(fork.stops)):
                return GuardRejection(
                    operation,
                    fork.id,
                    RejectionReason.INVALID_ARGUMENT,
                    f"cannot move stop {index} {direction}",
                )
            return None

        def mutate(fork: JourneyFork) -> None:
            assert offset is not None
            other = index + offset
            fork.stops[index], fork.stops[other] = fork.stops[other], fork.stops[index]

        return self._edit(operation, target, mutate, validate)

    def reorder_stops(self, target: Target, stop_ids: Sequence[str]) -> MutationResult:
        """Replace the stop order. `stop_ids` must be a permutation."""
        operation = "reorder_stops"

        def validate(fork: JourneyFork) -> GuardRejection | None:
            current = [stop.id for stop in fork.stops]
            if sorted(current) != sorted(stop_ids):
                return GuardRejection(
                    operation,
                    fork.id,
                    RejectionReason.INVALID_ARGUMENT,
                    "stop ids must match the current stops",
                )
            return None

        def mutate(fork: JourneyFork) -> None:
            by_id = {stop.id: stop for stop in fork.stops}
            fork.stops = [by_id[stop_id] for stop_id in stop_ids]

        return self._edit(operation, target, mutate, validate)

    def update_note(self, target: Target, stop_id: str, note: str) -> MutationResult:
        """Set a stop's personal note. A blank note clears it."""

        def mutate(fork: JourneyFork) -> None:
            stop = fork.get_stop(stop_id)
            assert stop is not None
            stop.note = note.strip() or None

        return self._edit(
            "update_note", target, mutate, self._stop_check("update_note", stop_id)
        )

    def mark_visited(
        self, target: Target, stop_id: str, visited: bool = True
    ) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            stop = fork.get_stop(stop_id)
            assert stop is not None
            stop.visited = visited

        return self._edit(
            "mark_visited", target, mutate, self._stop_check("mark_visited", stop_id)
        )

    def toggle_visited(self, target: Target, stop_id: str) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            stop = fork.get_stop(stop_id)
            assert stop is not None
            stop.visited = not stop.visited

        return self._edit(
            "toggle_visited", target, mutate, self._stop_check("toggle_visited", stop_id)
        )

    # --- Moments ---

    def _moment_check(
        self, operation: str, moment_id: str
    ) -> Callable[[JourneyFork], GuardRejection | None]:
        def validate(fork: JourneyFork) -> GuardRejection | None:
            if fork.get_moment(moment_id) is None:
                return GuardRejection(
                    operation, fork.id, RejectionReason.NO_SUCH_MOMENT, moment_id
                )
            return None

        return validate

    def add_moment(self, target: Target, moment: Moment) -> MutationResult:
        new_moment = moment.copy()

        def validate(fork: JourneyFork) -> GuardRejection | None:
            if fork.get_moment(new_moment.id) is not None:
                return GuardRejection(
                    "add_moment", fork.id, RejectionReason.DUPLICATE, new_moment.id
                )
            return None

        def mutate(fork: JourneyFork) -> None:
            fork.moments.append(new_moment)

        return self._edit("add_moment", target, mutate, validate)

    def update_moment(
        self,
        target: Target,
        moment_id: str,
        *,
        caption: str | None = None,
        image_url: str | None = None,
    ) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            moment = fork.get_moment(moment_id)
            assert moment is not None
            if caption is not None:
                moment.caption = caption
            if image_url is not None:
                moment.image_url = image_url

        return self._edit(
            "update_moment", target, mutate, self._moment_check("update_moment", moment_id)
        )

    def delete_moment(self, target: Target, moment_id: str) -> MutationResult:
        def mutate(fork: JourneyFork) -> None:
            fork.moments = [m for m in fork.moments if m.id != moment_id]

        return self._edit(
            "delete_moment", target, mutate, self._moment_check("delete_moment", moment_id)
        )
