"""Shared context helpers for CLI command modules."""

from __future__ import annotations

import sys

from trippin.config.settings import settings
from trippin.content.catalog import CatalogError, load_catalog
from trippin.state.manager import JourneyStateManager, MutationResult
from trippin.state.ownership import InvariantViolationError, OwnershipStore
from trippin.storage.store import FileStore


def load_manager_or_error() -> JourneyStateManager | None:
    """Build the state manager from settings or print an error and return None."""
    try:
        templates = load_catalog(settings.catalog_path)
    except (CatalogError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    store = FileStore(settings.data_directory)
    try:
        ownership = OwnershipStore(
            store, templates, strict=settings.strict_invariants
        )
    except InvariantViolationError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"  Data directory: {settings.data_directory}", file=sys.stderr)
        return None
    return JourneyStateManager(ownership)


def focus(manager: JourneyStateManager, fork_id: str) -> None:
    """Make a planner fork active before editing it, as opening it would.

    Forks outside the planner are left alone so the edit itself reports
    why it is refused.
    """
    if manager.active_fork_id == fork_id:
        return
    if manager.ownership.find_in_planner(fork_id) is not None:
        manager.open(fork_id)


def report(result: MutationResult, message: str) -> int:
    """Print the outcome of a mutation and return the exit code."""
    if not result.ok:
        print(f"Error: {result.rejection}", file=sys.stderr)
        return 1
    print(message)
    return 0
