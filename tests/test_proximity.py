"""Tests for the proximity resolver."""

from __future__ import annotations

import pytest

from trippin.models.journey import JourneyFork
from trippin.models.stop import UserStop
from trippin.navigation.location import LocationFix, ReplayLocationProvider
from trippin.navigation.proximity import (
    DEFAULT_THRESHOLD_M,
    ProximityResolver,
    ProximityState,
)
from trippin.state.manager import JourneyStateManager


def _route(manager: JourneyStateManager, count: int = 5) -> JourneyFork:
    """Custom journey with stops 0.01 degrees (about 1.1 km) apart going north."""
    result = manager.create_custom("Meridian walk")
    assert result.fork is not None
    fork_id = result.fork.id
    manager.open(fork_id)
    for i in range(count):
        stop = UserStop(id=f"s{i + 1}", name=f"Stop {i + 1}", coordinates=(0.0, i * 0.01))
        assert manager.add_stop(fork_id, stop).ok
    fork = manager.find(fork_id)
    assert fork is not None
    return fork


def _visited(manager: JourneyStateManager, fork_id: str) -> list[bool]:
    fork = manager.find(fork_id)
    assert fork is not None
    return [stop.visited for stop in fork.stops]


def _fixes(*latitudes: float) -> list[LocationFix]:
    return [LocationFix((0.0, lat)) for lat in latitudes]


def test_threshold_must_be_positive(manager: JourneyStateManager) -> None:
    with pytest.raises(ValueError):
        ProximityResolver(manager, ReplayLocationProvider(), threshold_m=0)


def test_default_threshold() -> None:
    assert DEFAULT_THRESHOLD_M == 75.0


class TestSubscriptionLifecycle:
    """Location is only listened to while the active fork is live."""

    def test_not_listening_while_planning(self, manager: JourneyStateManager) -> None:
        _route(manager)
        provider = ReplayLocationProvider()
        resolver = ProximityResolver(manager, provider)
        resolver.attach()
        assert not resolver.is_listening
        assert provider.subscriber_count == 0

    def test_start_and_stop_toggle_subscription(self, manager: JourneyStateManager) -> None:
        fork = _route(manager)
        provider = ReplayLocationProvider()
        resolver = ProximityResolver(manager, provider)
        resolver.attach()

        manager.start(fork.id)
        assert resolver.is_listening
        assert provider.subscriber_count == 1

        manager.stop(fork.id)
        assert not resolver.is_listening
        assert provider.subscriber_count == 0

    def test_attach_while_already_live(self, manager: JourneyStateManager) -> None:
        fork = _route(manager)
        manager.start(fork.id)
        provider = ReplayLocationProvider()
        resolver = ProximityResolver(manager, provider)
        resolver.attach()
        assert provider.subscriber_count == 1

    def test_complete_and_detach_unsubscribe(self, manager: JourneyStateManager) -> None:
        fork = _route(manager)
        provider = ReplayLocationProvider()
        resolver = ProximityResolver(manager, provider)
        resolver.attach()
        manager.start(fork.id)
        manager.complete(fork.id)
        assert provider.subscriber_count == 0

        other = _route(manager)
        manager.start(other.id)
        assert provider.subscriber_count == 1
        resolver.detach()
        assert provider.subscriber_count == 0
        manager.stop(other.id)
        manager.start(other.id)
        assert provider.subscriber_count == 0

    def test_inspection_pauses_listening(self, manager: JourneyStateManager) -> None:
        fork = _route(manager)
        provider = ReplayLocationProvider()
        resolver = ProximityResolver(manager, provider)
        resolver.attach()
        manager.start(fork.id)
        manager.inspect_template("harbor-walk")
        assert provider.subscriber_count == 0
        manager.end_inspection()
        assert provider.subscriber_count == 1


class TestAdvance:
    def test_monotonic_advance_along_trajectory(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=5)
        # Passes within 75 m of s1, s2, s3 in order, then stops between s3 and s4.
        track = _fixes(0.0003, 0.005, 0.0102, 0.015, 0.0199, 0.025)
        provider = ReplayLocationProvider(track)
        resolver = ProximityResolver(manager, provider)
        resolver.attach()
        manager.start(fork.id)

        history: list[list[bool]] = []
        for fix in track:
            provider.push(fix)
            history.append(_visited(manager, fork.id))

        assert history[-1] == [True, True, True, False, False]
        for visited in history:
            # Visited stops always form a prefix of the route
            assert visited == sorted(visited, reverse=True)

    def test_out_of_order_stop_is_not_marked(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=3)
        provider = ReplayLocationProvider()
        resolver = ProximityResolver(manager, provider)
        resolver.attach()
        manager.start(fork.id)

        provider.push(LocationFix((0.0, 0.01)))
        assert _visited(manager, fork.id) == [False, False, False]
        provider.push(LocationFix((0.0, 0.0)))
        assert _visited(manager, fork.id) == [True, False, False]
        provider.push(LocationFix((0.0, 0.01)))
        assert _visited(manager, fork.id) == [True, True, False]

    def test_custom_threshold(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=2)
        provider = ReplayLocationProvider(_fixes(0.001))  # about 111 m from s1
        resolver = ProximityResolver(manager, provider, threshold_m=150)
        resolver.attach()
        manager.start(fork.id)
        provider.replay()
        assert _visited(manager, fork.id) == [True, False]

    def test_publishes_target_and_distance(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=2)
        provider = ReplayLocationProvider()
        resolver = ProximityResolver(manager, provider)
        states: list[ProximityState] = []
        resolver.subscribe(states.append)
        resolver.attach()
        manager.start(fork.id)

        provider.push(LocationFix((0.0, 0.005)))
        assert states[-1].current_active_stop is not None
        assert states[-1].current_active_stop.id == "s1"
        assert states[-1].distance_m == pytest.approx(556, abs=1)

        manager.stop(fork.id)
        assert states[-1] == ProximityState()
        assert resolver.last_fix is None

    def test_all_visited_clears_state(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=1)
        provider = ReplayLocationProvider(_fixes(0.0, 0.0))
        resolver = ProximityResolver(manager, provider)
        resolver.attach()
        manager.start(fork.id)
        provider.replay()
        assert _visited(manager, fork.id) == [True]
        assert resolver.state == ProximityState()

    def test_no_fix_clears_state(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=1)
        resolver = ProximityResolver(manager, ReplayLocationProvider())
        manager.start(fork.id)
        assert resolver.handle_fix(None) == ProximityState()

    def test_fix_ignored_when_not_navigating(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=1)
        resolver = ProximityResolver(manager, ReplayLocationProvider())
        resolver.handle_fix(LocationFix((0.0, 0.0)))
        assert _visited(manager, fork.id) == [False]

    def test_manual_override_still_works(self, manager: JourneyStateManager) -> None:
        fork = _route(manager, count=3)
        manager.start(fork.id)
        assert manager.mark_visited(fork.id, "s3").ok
        assert _visited(manager, fork.id) == [False, False, True]
