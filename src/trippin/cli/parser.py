"""Argument parser construction for Trippin CLI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path


def _positive_meters(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}") from e
    if value <= 0:
        raise argparse.ArgumentTypeError("threshold must be positive")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        description="Trippin - plan, navigate and remember journeys"
    )
    parser.add_argument(
        "--workdir",
        "-w",
        type=Path,
        help="Working directory for journey data (default: current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Discovery
    subparsers.add_parser("catalog", help="List journey templates")

    show_parser = subparsers.add_parser(
        "show",
        help="Show a template or fork (read-only)",
    )
    show_parser.add_argument("journey_id", help="Template or fork id")

    # Planner
    fork_parser = subparsers.add_parser(
        "fork",
        help="Copy a template into your planner",
    )
    fork_parser.add_argument("template_id", help="Template id to fork")

    new_parser = subparsers.add_parser("new", help="Create an empty custom journey")
    new_parser.add_argument("title", nargs="?", default="", help="Journey title")

    trips_parser = subparsers.add_parser("trips", help="List your journeys")
    trips_parser.add_argument(
        "--completed",
        action="store_true",
        help="List completed journeys instead of the planner",
    )
    trips_parser.add_argument(
        "--json",
        action="store_true",
        help="Dump both collections as JSON",
    )

    # Lifecycle
    for name, help_text in (
        ("start", "Start navigating a planned journey"),
        ("stop", "Stop navigating a live journey"),
        ("complete", "Mark a journey completed"),
        ("delete", "Delete a journey"),
    ):
        lifecycle_parser = subparsers.add_parser(name, help=help_text)
        lifecycle_parser.add_argument("fork_id", help="Fork id")

    # Edits
    rename_parser = subparsers.add_parser("rename", help="Rename a journey")
    rename_parser.add_argument("fork_id", help="Fork id")
    rename_parser.add_argument("title", help="New title")

    visit_parser = subparsers.add_parser("visit", help="Mark a stop visited")
    visit_parser.add_argument("fork_id", help="Fork id")
    visit_parser.add_argument("stop_id", help="Stop id")
    visit_parser.add_argument(
        "--toggle",
        action="store_true",
        help="Flip the visited flag instead of setting it",
    )

    note_parser = subparsers.add_parser("note", help="Set a personal note on a stop")
    note_parser.add_argument("fork_id", help="Fork id")
    note_parser.add_argument("stop_id", help="Stop id")
    note_parser.add_argument("text", help="Note text (empty clears the note)")

    describe_parser = subparsers.add_parser(
        "describe",
        help="Set a journey's description (allowed after completion)",
    )
    describe_parser.add_argument("fork_id", help="Fork id")
    describe_parser.add_argument("text", help="Description text")

    # Navigation
    navigate_parser = subparsers.add_parser(
        "navigate",
        help="Replay a recorded location track against a journey",
    )
    navigate_parser.add_argument("fork_id", help="Fork id")
    navigate_parser.add_argument(
        "track",
        type=Path,
        help="YAML file with location fixes",
    )
    navigate_parser.add_argument(
        "--threshold",
        type=_positive_meters,
        help="Arrival radius in meters (default: from settings)",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    return build_parser().parse_args(argv)
