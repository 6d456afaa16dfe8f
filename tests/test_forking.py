"""Tests for the fork factory."""

from datetime import UTC, datetime

from trippin.models.forking import (
    DEFAULT_CUSTOM_TITLE,
    create_custom_fork,
    create_fork,
    new_fork_id,
)
from trippin.models.journey import CustomOrigin, JourneySource, JourneyStatus, TemplateOrigin


class TestCreateFork:
    """Forking copies a template into a fresh planned journey."""

    def test_fork_starts_planned_with_lineage(self, harbor: JourneySource) -> None:
        fork = create_fork(harbor)
        assert fork.status == JourneyStatus.PLANNED
        assert fork.origin == TemplateOrigin("harbor-walk")
        assert fork.id != harbor.id
        assert fork.id.startswith("fork-")

    def test_fork_copies_metadata(self, harbor: JourneySource) -> None:
        fork = create_fork(harbor)
        assert fork.title == harbor.title
        assert fork.location == harbor.location
        assert fork.duration == harbor.duration
        assert fork.image_url == harbor.image_url
        assert fork.author == harbor.author

    def test_stops_are_unvisited_copies(self, harbor: JourneySource) -> None:
        fork = create_fork(harbor)
        assert [s.id for s in fork.stops] == ["pier", "lighthouse", "market"]
        assert all(not s.visited and s.note is None for s in fork.stops)
        assert fork.stops[0].activities == ["Fishing"]

    def test_moments_start_empty(self, harbor: JourneySource) -> None:
        assert harbor.moments
        assert create_fork(harbor).moments == []

    def test_cloned_at_uses_given_time(self, harbor: JourneySource) -> None:
        at = datetime(2026, 3, 4, 5, 6, tzinfo=UTC)
        assert create_fork(harbor, now=at).cloned_at == at

    def test_two_forks_share_nothing(self, harbor: JourneySource) -> None:
        first = create_fork(harbor)
        second = create_fork(harbor)
        assert first.id != second.id

        first.stops[0].visited = True
        first.stops[1].gallery.append("mine.jpg")
        assert second.stops[0].visited is False
        assert second.stops[1].gallery == ["https://example.com/light-1.jpg"]
        assert harbor.stops[1].gallery == ("https://example.com/light-1.jpg",)


class TestCreateCustomFork:
    def test_custom_fork_has_no_lineage(self) -> None:
        fork = create_custom_fork("Weekend")
        assert isinstance(fork.origin, CustomOrigin)
        assert fork.source_journey_id is None
        assert fork.title == "Weekend"
        assert fork.stops == []
        assert fork.status == JourneyStatus.PLANNED

    def test_blank_title_gets_default(self) -> None:
        assert create_custom_fork("   ").title == DEFAULT_CUSTOM_TITLE


def test_new_fork_ids_are_unique() -> None:
    ids = {new_fork_id() for _ in range(100)}
    assert len(ids) == 100
