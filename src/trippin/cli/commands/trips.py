"""Planner commands: fork, create, list and delete journeys."""

from __future__ import annotations

import argparse

from trippin.cli.context import load_manager_or_error, report
from trippin.cli.render import forks_table, get_console
from trippin.state.ownership import dump_collections


def cmd_fork(args: argparse.Namespace) -> int:
    """Fork a template into the planner."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    result = manager.fork(args.template_id)
    if not result.ok:
        return report(result, "")
    assert result.fork is not None
    return report(result, f"Forked {args.template_id} into {result.fork.id}")


def cmd_new(args: argparse.Namespace) -> int:
    """Create an empty custom journey."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    result = manager.create_custom(args.title)
    if not result.ok:
        return report(result, "")
    assert result.fork is not None
    return report(result, f"Created {result.fork.id}: {result.fork.title}")


def cmd_trips(args: argparse.Namespace) -> int:
    """List planner (or completed) journeys."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    if args.json:
        print(dump_collections(manager.ownership))
        return 0

    if args.completed:
        forks = manager.ownership.completed
        title = "Completed journeys"
    else:
        forks = manager.ownership.planner
        title = "Planner"

    if not forks:
        print(f"{title}: nothing here yet.")
        return 0
    get_console().print(forks_table(forks, title, manager.active_fork_id))
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete a journey from whichever collection owns it."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    result = manager.delete_fork(args.fork_id)
    return report(result, f"Deleted {args.fork_id}")
