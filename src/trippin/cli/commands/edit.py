"""Edit commands. Edits apply to the active journey, so each one opens it first."""

from __future__ import annotations

import argparse

from trippin.cli.context import focus, load_manager_or_error, report


def cmd_rename(args: argparse.Namespace) -> int:
    manager = load_manager_or_error()
    if manager is None:
        return 1

    focus(manager, args.fork_id)
    result = manager.rename(args.fork_id, args.title)
    return report(result, f"Renamed {args.fork_id} to {args.title.strip()}")


def cmd_visit(args: argparse.Namespace) -> int:
    """Mark a stop visited, or flip its flag with --toggle."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    focus(manager, args.fork_id)
    if args.toggle:
        result = manager.toggle_visited(args.fork_id, args.stop_id)
    else:
        result = manager.mark_visited(args.fork_id, args.stop_id)
    if not result.ok:
        return report(result, "")

    assert result.fork is not None
    stop = result.fork.get_stop(args.stop_id)
    assert stop is not None
    state = "visited" if stop.visited else "not visited"
    return report(
        result,
        f"{stop.name} {state} "
        f"({result.fork.visited_count}/{len(result.fork.stops)} stops visited)",
    )


def cmd_note(args: argparse.Namespace) -> int:
    manager = load_manager_or_error()
    if manager is None:
        return 1

    focus(manager, args.fork_id)
    result = manager.update_note(args.fork_id, args.stop_id, args.text)
    message = "Note cleared" if not args.text.strip() else "Note saved"
    return report(result, f"{message} for {args.stop_id}")


def cmd_describe(args: argparse.Namespace) -> int:
    """Set the description. Completed journeys accept this edit too."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    focus(manager, args.fork_id)
    result = manager.update_description(args.fork_id, args.text)
    return report(result, f"Description updated for {args.fork_id}")
