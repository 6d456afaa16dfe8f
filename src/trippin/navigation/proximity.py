"""Proximity resolver: advance the active fork's stops during navigation.

On every location fix the resolver picks the first unvisited stop of the
active fork, publishes the distance to it, and marks it visited through the
state manager once the user is within the threshold. The next fix then
selects the following stop, so advancement is strictly sequential.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from trippin.models.stop import UserStop
from trippin.navigation.geometry import haversine_m
from trippin.navigation.location import LocationFix, LocationProvider
from trippin.state.manager import JourneyStateManager, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_M = 75.0


@dataclass(frozen=True)
class ProximityState:
    """Published after each fix: the stop being approached and how far it is."""

    current_active_stop: UserStop | None = None
    distance_m: float | None = None


CLEARED = ProximityState()

ProximityListener = Callable[[ProximityState], None]


class ProximityResolver:
    """Listens to location fixes only while the active fork is live."""

    def __init__(
        self,
        manager: JourneyStateManager,
        provider: LocationProvider,
        threshold_m: float = DEFAULT_THRESHOLD_M,
    ) -> None:
        if threshold_m <= 0:
            raise ValueError("threshold_m must be positive")
        self.manager = manager
        self.provider = provider
        self.threshold_m = threshold_m
        self.state: ProximityState = CLEARED
        self.last_fix: LocationFix | None = None
        self._listeners: list[ProximityListener] = []
        self._unsubscribe_provider: Callable[[], None] | None = None
        self._unsubscribe_manager: Callable[[], None] | None = None

    @property
    def is_listening(self) -> bool:
        return self._unsubscribe_provider is not None

    def attach(self) -> None:
        """Follow manager state; subscribe to fixes whenever navigating."""
        if self._unsubscribe_manager is None:
            self._unsubscribe_manager = self.manager.subscribe(self._on_snapshot)
        self._sync(self.manager.view.is_navigating)

    def detach(self) -> None:
        """Stop following the manager and drop the location subscription."""
        if self._unsubscribe_manager is not None:
            self._unsubscribe_manager()
            self._unsubscribe_manager = None
        self._sync(False)

    def subscribe(self, listener: ProximityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        self._sync(snapshot.view.is_navigating)

    def _sync(self, navigating: bool) -> None:
        if navigating and self._unsubscribe_provider is None:
            logger.info("Navigation started; listening for location")
            self._unsubscribe_provider = self.provider.subscribe(self.handle_fix)
        elif not navigating and self._unsubscribe_provider is not None:
            logger.info("Navigation ended; location listener removed")
            self._unsubscribe_provider()
            self._unsubscribe_provider = None
            self.last_fix = None
            self._publish(CLEARED)

    def _publish(self, state: ProximityState) -> None:
        if state == self.state:
            return
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    def handle_fix(self, fix: LocationFix | None) -> ProximityState:
        """Run one resolution pass for a location fix."""
        self.last_fix = fix
        view = self.manager.view
        fork = view.active_fork
        if not view.is_navigating or fork is None or not fork.stops or fix is None:
            self._publish(CLEARED)
            return self.state

        stop = fork.first_unvisited()
        if stop is None:
            self._publish(CLEARED)
            return self.state

        distance = haversine_m(fix.coordinates, stop.coordinates)
        self._publish(ProximityState(current_active_stop=stop, distance_m=distance))

        if distance <= self.threshold_m:
            logger.info(
                "Arrived at %s (%.1f m) on %s", stop.id, distance, fork.id
            )
            result = self.manager.mark_visited(fork.id, stop.id)
            if not result.ok:
                logger.debug("Auto-visit not applied: %s", result.rejection)
        return self.state
