"""Ownership store: templates, planner forks and completed forks.

Three disjoint collections:
- templates: read-only catalog supplied by the content layer, never persisted
- planner: forks whose status is planned or live
- completed: forks whose status is completed

Each fork collection mirrors to its own storage key. In-memory state is the
authority and storage failures are logged, not raised. Readers get deep
copies; the only way to change a stored fork is `update()`, which the state
manager calls after its guards pass.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from trippin.models.journey import (
    PLANNER_STATUSES,
    JourneyFork,
    JourneySource,
    JourneyStatus,
)
from trippin.models.schema import SchemaError, decode_records, encode_records
from trippin.storage.store import KeyValueStore, PersistenceError

logger = logging.getLogger(__name__)

PLANNER_KEY = "trippin_planner_forks"
COMPLETED_KEY = "trippin_completed_forks"
SESSION_KEY = "trippin_session"

_SCHEMA_FOR_KEY = {
    PLANNER_KEY: "planner",
    COMPLETED_KEY: "completed",
}


class InvariantViolationError(Exception):
    """Raised in strict mode when stored collections break an invariant."""

    def __init__(self, fork_id: str, message: str) -> None:
        self.fork_id = fork_id
        super().__init__(f"Invariant violated for {fork_id}: {message}")


class OwnershipStore:
    """Owns the template catalog and both fork collections."""

    def __init__(
        self,
        store: KeyValueStore,
        templates: Iterable[JourneySource] = (),
        *,
        strict: bool = False,
    ) -> None:
        self.store = store
        self.strict = strict
        self._templates: dict[str, JourneySource] = {}
        for template in templates:
            if template.id in self._templates:
                logger.warning("Duplicate template id ignored: %s", template.id)
                continue
            self._templates[template.id] = template
        self._planner: list[JourneyFork] = []
        self._completed: list[JourneyFork] = []
        self.load()

    # --- Templates ---

    @property
    def templates(self) -> list[JourneySource]:
        return list(self._templates.values())

    def template(self, template_id: str) -> JourneySource | None:
        return self._templates.get(template_id)

    # --- Reads ---

    @property
    def planner(self) -> list[JourneyFork]:
        """Planner forks in order (copies)."""
        return [fork.copy() for fork in self._planner]

    @property
    def completed(self) -> list[JourneyFork]:
        """Completed forks in order (copies)."""
        return [fork.copy() for fork in self._completed]

    def find(self, fork_id: str) -> JourneyFork | None:
        """Find a fork in the planner, then in completed."""
        fork = self._locate(fork_id)
        return fork.copy() if fork else None

    def find_in_planner(self, fork_id: str) -> JourneyFork | None:
        fork = _find(self._planner, fork_id)
        return fork.copy() if fork else None

    def find_in_completed(self, fork_id: str) -> JourneyFork | None:
        fork = _find(self._completed, fork_id)
        return fork.copy() if fork else None

    def contains(self, fork_id: str) -> bool:
        return self._locate(fork_id) is not None

    def forks_for_source(self, source_id: str) -> list[JourneyFork]:
        """All forks (planner and completed) made from a template."""
        return [
            fork.copy()
            for fork in (*self._planner, *self._completed)
            if fork.source_journey_id == source_id
        ]

    def live_forks(self) -> list[JourneyFork]:
        return [
            fork.copy() for fork in self._planner if fork.status == JourneyStatus.LIVE
        ]

    def _locate(self, fork_id: str) -> JourneyFork | None:
        return _find(self._planner, fork_id) or _find(self._completed, fork_id)

    # --- Writes ---

    def add_to_planner(self, fork: JourneyFork) -> bool:
        """Append a fork to the planner.

        Returns False (and logs) if the id already exists in either
        collection or the fork is not in a planner status.
        """
        if self.contains(fork.id):
            logger.warning("Fork with ID %s already exists", fork.id)
            return False
        if fork.status not in PLANNER_STATUSES:
            logger.warning(
                "Fork %s has status %s and cannot join the planner",
                fork.id,
                fork.status.value,
            )
            return False
        self._planner.append(fork.copy())
        self._persist(PLANNER_KEY)
        return True

    def update(
        self, fork_id: str, mutate: Callable[[JourneyFork], None]
    ) -> JourneyFork | None:
        """Apply `mutate` to the stored fork and persist its collection.

        Returns a copy of the updated fork, or None if no fork has that id.
        Status changes that would move a fork between collections must go
        through `move_to_completed` instead.
        """
        if (fork := _find(self._planner, fork_id)) is not None:
            key, forks = PLANNER_KEY, self._planner
        elif (fork := _find(self._completed, fork_id)) is not None:
            key, forks = COMPLETED_KEY, self._completed
        else:
            logger.warning("Fork with ID %s not found", fork_id)
            return None

        # Mutate a working copy so a rejected change leaves the store untouched
        working = fork.copy()
        mutate(working)
        if (fork.status in PLANNER_STATUSES) != (working.status in PLANNER_STATUSES):
            raise InvariantViolationError(
                fork_id, "status change would cross collections; use move_to_completed"
            )
        forks[forks.index(fork)] = working
        self._persist(key)
        return working.copy()

    def move_to_completed(
        self, fork_id: str, *, now: datetime | None = None
    ) -> JourneyFork | None:
        """Complete a planner fork and transfer it to the completed collection.

        Durable writes are sequenced planner first, completed second, so a
        reader of storage between the two sees the fork missing, never
        duplicated.
        """
        fork = _find(self._planner, fork_id)
        if fork is None:
            logger.warning("Cannot complete %s: not in planner", fork_id)
            return None

        fork.transition(JourneyStatus.COMPLETED, reason="complete", now=now)
        self._planner = [f for f in self._planner if f.id != fork_id]
        self._completed.append(fork)

        self._persist(PLANNER_KEY)
        self._persist(COMPLETED_KEY)
        logger.info("Moved %s to completed", fork_id)
        return fork.copy()

    def remove(self, fork_id: str) -> bool:
        """Delete a fork from whichever collection owns it."""
        for key, forks in ((PLANNER_KEY, self._planner), (COMPLETED_KEY, self._completed)):
            fork = _find(forks, fork_id)
            if fork is not None:
                forks.remove(fork)
                self._persist(key)
                logger.info("Removed fork %s", fork_id)
                return True
        return False

    # --- Session pointer ---

    def load_session(self) -> str | None:
        """Return the persisted active fork id, if any."""
        raw = self._get(SESSION_KEY)
        if raw is None:
            return None
        try:
            records = decode_records(SESSION_KEY, raw, "session")
        except SchemaError as e:
            logger.error("Ignoring unreadable session: %s", e)
            return None
        if not records:
            return None
        active = records[0].get("active_fork_id")
        return str(active) if active else None

    def save_session(self, active_fork_id: str | None) -> None:
        self._set(
            SESSION_KEY,
            encode_records("session", [{"active_fork_id": active_fork_id}]),
        )

    # --- Persistence ---

    def load(self) -> None:
        """Load both collections from storage and repair any inconsistency.

        A fork found in both collections keeps only its completed copy,
        since completion is terminal.
        """
        planner = self._read(PLANNER_KEY)
        completed = self._read(COMPLETED_KEY)
        repaired = False

        completed_ids: set[str] = set()
        clean_completed: list[JourneyFork] = []
        for fork in completed:
            if fork.id in completed_ids:
                logger.error("Duplicate completed fork dropped: %s", fork.id)
                repaired = True
                continue
            if fork.status != JourneyStatus.COMPLETED:
                logger.error(
                    "Completed fork %s had status %s; forcing completed",
                    fork.id,
                    fork.status.value,
                )
                fork.transition(JourneyStatus.COMPLETED, reason="repair")
                repaired = True
            completed_ids.add(fork.id)
            clean_completed.append(fork)

        planner_ids: set[str] = set()
        clean_planner: list[JourneyFork] = []
        for fork in planner:
            if fork.id in completed_ids:
                self._violation(fork.id, "present in both planner and completed")
                repaired = True
                continue
            if fork.id in planner_ids:
                logger.error("Duplicate planner fork dropped: %s", fork.id)
                repaired = True
                continue
            planner_ids.add(fork.id)
            if fork.status == JourneyStatus.COMPLETED:
                logger.error("Planner fork %s was completed; moving it", fork.id)
                clean_completed.append(fork)
                completed_ids.add(fork.id)
                repaired = True
                continue
            clean_planner.append(fork)

        live = [f for f in clean_planner if f.status == JourneyStatus.LIVE]
        for extra in live[1:]:
            logger.error("More than one live fork; resetting %s", extra.id)
            extra.transition(JourneyStatus.PLANNED, reason="repair")
            repaired = True

        self._planner = clean_planner
        self._completed = clean_completed
        logger.info(
            "Loaded %d planner and %d completed forks",
            len(self._planner),
            len(self._completed),
        )
        if repaired:
            self._persist(PLANNER_KEY)
            self._persist(COMPLETED_KEY)

    def _violation(self, fork_id: str, message: str) -> None:
        logger.error("Invariant violation for %s: %s", fork_id, message)
        if self.strict:
            raise InvariantViolationError(fork_id, message)

    def _read(self, key: str) -> list[JourneyFork]:
        raw = self._get(key)
        if raw is None:
            return []
        try:
            records = decode_records(key, raw, _SCHEMA_FOR_KEY[key])
            return [JourneyFork.from_dict(record) for record in records]
        except (SchemaError, KeyError, TypeError, ValueError) as e:
            logger.error("Failed to load %s, starting empty: %s", key, e)
            return []

    def _persist(self, key: str) -> None:
        forks = self._planner if key == PLANNER_KEY else self._completed
        self._set(key, encode_records(_SCHEMA_FOR_KEY[key], [f.to_dict() for f in forks]))

    def _get(self, key: str) -> bytes | None:
        try:
            return self.store.get(key)
        except PersistenceError as e:
            logger.error("Failed to read %s: %s", key, e)
            return None

    def _set(self, key: str, value: bytes) -> None:
        try:
            self.store.set(key, value)
        except PersistenceError as e:
            logger.error("Failed to save %s: %s", key, e)


def _find(forks: list[JourneyFork], fork_id: str) -> JourneyFork | None:
    return next((fork for fork in forks if fork.id == fork_id), None)


def dump_collections(ownership: OwnershipStore) -> str:
    """Pretty JSON of both collections, for debugging."""
    return json.dumps(
        {
            "planner": [fork.to_dict() for fork in ownership.planner],
            "completed": [fork.to_dict() for fork in ownership.completed],
        },
        indent=2,
    )
