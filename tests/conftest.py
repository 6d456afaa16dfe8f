from __future__ import annotations

import copy
from collections.abc import Iterator

import pytest

from trippin.config.paths import reset_paths
from trippin.config.settings import settings
from trippin.content.catalog import parse_catalog
from trippin.models.journey import JourneySource
from trippin.state.manager import JourneyStateManager
from trippin.state.ownership import OwnershipStore
from trippin.storage.store import MemoryStore

# Stops sit on the meridian about 1.1 km apart.
CATALOG_YAML = """
journeys:
  - id: harbor-walk
    title: Harbor Walk
    location: Null Island
    duration: 1 Day
    image_url: https://example.com/harbor.jpg
    author:
      name: Ada
      avatar: https://example.com/ada.png
    stops:
      - id: pier
        name: Pier
        coordinates: [0.0, 0.0]
        activities: [Fishing]
      - id: lighthouse
        name: Lighthouse
        coordinates: [0.0, 0.01]
        gallery: [https://example.com/light-1.jpg]
      - id: market
        name: Market
        coordinates: [0.0, 0.02]
    moments:
      - id: dawn
        coordinates: [0.0, 0.0]
        caption: Dawn at the pier
  - id: old-town
    title: Old Town
    location: Null Island
    duration: 2 Hours
    author:
      name: Grace
    stops:
      - id: gate
        name: Gate
        coordinates: [1.0, 1.0]
      - id: square
        name: Square
        coordinates: [1.0, 1.005]
"""


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Prevent tests from persisting settings to disk."""
    original_data = copy.deepcopy(settings._data)

    def _noop_save() -> None:
        return None

    monkeypatch.setattr(settings, "_save", _noop_save)
    monkeypatch.delenv("TRIPPIN_PROXIMITY_M", raising=False)
    settings._data = {}
    reset_paths()
    try:
        yield
    finally:
        settings._data = original_data
        reset_paths()


@pytest.fixture
def templates() -> tuple[JourneySource, ...]:
    return parse_catalog(CATALOG_YAML, "test catalog")


@pytest.fixture
def harbor(templates: tuple[JourneySource, ...]) -> JourneySource:
    return templates[0]


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def ownership(
    store: MemoryStore, templates: tuple[JourneySource, ...]
) -> OwnershipStore:
    return OwnershipStore(store, templates)


@pytest.fixture
def manager(ownership: OwnershipStore) -> JourneyStateManager:
    return JourneyStateManager(ownership)
