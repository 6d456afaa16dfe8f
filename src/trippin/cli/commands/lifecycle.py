"""Lifecycle commands: start, stop and complete journeys."""

from __future__ import annotations

import argparse

from trippin.cli.context import load_manager_or_error, report


def cmd_start(args: argparse.Namespace) -> int:
    """Start live navigation. Any other live journey returns to planned."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    result = manager.start(args.fork_id)
    return report(result, f"Navigating {args.fork_id}")


def cmd_stop(args: argparse.Namespace) -> int:
    manager = load_manager_or_error()
    if manager is None:
        return 1

    result = manager.stop(args.fork_id)
    return report(result, f"Stopped navigating {args.fork_id}")


def cmd_complete(args: argparse.Namespace) -> int:
    """Complete a journey and move it out of the planner."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    result = manager.complete(args.fork_id)
    if not result.ok:
        return report(result, "")
    assert result.fork is not None
    return report(
        result,
        f"Completed {result.fork.title} "
        f"({result.fork.visited_count}/{len(result.fork.stops)} stops visited)",
    )
