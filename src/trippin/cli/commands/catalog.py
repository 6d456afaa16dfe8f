"""Catalog browsing commands."""

from __future__ import annotations

import argparse
import sys

from trippin.cli.context import load_manager_or_error
from trippin.cli.render import catalog_table, get_console, journey_detail


def cmd_catalog(args: argparse.Namespace) -> int:
    """List the journey templates available for forking."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    templates = manager.templates
    if not templates:
        print("No journey templates found.")
        return 0
    get_console().print(catalog_table(templates))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Show a template or a fork through read-only inspection."""
    manager = load_manager_or_error()
    if manager is None:
        return 1

    journey_id = args.journey_id
    if manager.ownership.template(journey_id) is not None:
        result = manager.inspect_template(journey_id)
    elif manager.ownership.find_in_completed(journey_id) is not None:
        result = manager.inspect_completed(journey_id)
    else:
        result = manager.inspect_fork(journey_id)
    if not result.ok:
        print(f"Error: Journey '{journey_id}' not found", file=sys.stderr)
        return 1

    journey = manager.view.current_entity
    assert journey is not None
    get_console().print(journey_detail(journey))
    return 0
