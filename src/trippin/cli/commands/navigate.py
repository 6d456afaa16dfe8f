"""Navigate command: replay a recorded track through the proximity resolver."""

from __future__ import annotations

import argparse
import logging
import sys

import yaml

from trippin.cli.context import load_manager_or_error, report
from trippin.config.settings import settings
from trippin.models.journey import JourneyStatus
from trippin.navigation.geometry import format_distance
from trippin.navigation.location import ReplayLocationProvider
from trippin.navigation.proximity import ProximityResolver, ProximityState

logger = logging.getLogger(__name__)


def cmd_navigate(args: argparse.Namespace) -> int:
    """Start (if needed) and navigate a journey along a recorded track."""
    try:
        provider = ReplayLocationProvider.from_yaml(args.track)
    except (OSError, ValueError, KeyError, TypeError, yaml.YAMLError) as e:
        print(f"Error: Could not read track {args.track}: {e}", file=sys.stderr)
        return 1

    manager = load_manager_or_error()
    if manager is None:
        return 1

    fork = manager.find(args.fork_id)
    if fork is None or fork.status != JourneyStatus.LIVE:
        result = manager.start(args.fork_id)
        if not result.ok:
            return report(result, "")

    threshold = args.threshold or settings.proximity_threshold_m
    resolver = ProximityResolver(manager, provider, threshold)

    def _print_state(state: ProximityState) -> None:
        if state.current_active_stop is None or state.distance_m is None:
            return
        print(
            f"  -> {state.current_active_stop.name}: "
            f"{format_distance(state.distance_m)}"
        )

    def _print_visits(before: set[str]) -> None:
        current = manager.find(args.fork_id)
        if current is None:
            return
        for stop in current.stops:
            if stop.visited and stop.id not in before:
                print(f"  ✓ Arrived at {stop.name}")
                before.add(stop.id)

    started = manager.find(args.fork_id)
    assert started is not None
    visited = {stop.id for stop in started.stops if stop.visited}
    resolver.subscribe(_print_state)
    unsubscribe = manager.subscribe(lambda _snapshot: _print_visits(visited))

    print(f"Navigating {args.fork_id} (arrival radius {format_distance(threshold)})")
    resolver.attach()
    try:
        count = provider.replay()
    finally:
        unsubscribe()
        resolver.detach()

    final = manager.find(args.fork_id)
    assert final is not None
    logger.info("Replayed %d fixes for %s", count, args.fork_id)
    print(
        f"Replayed {count} fixes: "
        f"{final.visited_count}/{len(final.stops)} stops visited"
    )
    if final.all_visited:
        print(f"All stops visited. Finish with: trippin complete {final.id}")
    return 0
