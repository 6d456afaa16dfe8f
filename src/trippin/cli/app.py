"""CLI orchestration and command routing."""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable, Sequence

from trippin.cli.commands import (
    cmd_catalog,
    cmd_complete,
    cmd_delete,
    cmd_describe,
    cmd_fork,
    cmd_navigate,
    cmd_new,
    cmd_note,
    cmd_rename,
    cmd_show,
    cmd_start,
    cmd_stop,
    cmd_trips,
    cmd_visit,
)
from trippin.cli.parser import build_parser, parse_args
from trippin.config.paths import get_paths, reset_paths

logger = logging.getLogger(__name__)


def dispatch(args: argparse.Namespace) -> int:
    """Route parsed args to the correct command handler."""
    command_handlers: dict[str, Callable[[argparse.Namespace], int]] = {
        "catalog": cmd_catalog,
        "show": cmd_show,
        "fork": cmd_fork,
        "new": cmd_new,
        "trips": cmd_trips,
        "start": cmd_start,
        "stop": cmd_stop,
        "complete": cmd_complete,
        "delete": cmd_delete,
        "rename": cmd_rename,
        "visit": cmd_visit,
        "note": cmd_note,
        "describe": cmd_describe,
        "navigate": cmd_navigate,
    }

    handler = command_handlers.get(args.command) if args.command else None
    if handler is None:
        build_parser().print_help()
        return 2

    return handler(args)


def run(
    argv: Sequence[str] | None = None,
    *,
    configure_logging: Callable[[], None] | None = None,
) -> int:
    """Parse args, apply shared CLI setup, and execute command."""
    args = parse_args(argv)

    if args.workdir:
        workdir = args.workdir.resolve()
        workdir.mkdir(parents=True, exist_ok=True)
        os.chdir(workdir)
        # Workspace paths are resolved from the new directory
        reset_paths()

    if configure_logging is not None:
        configure_logging()

    logger.info("Working directory: %s", get_paths().workspace)
    return dispatch(args)
