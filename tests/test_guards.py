"""Tests for lifecycle guard predicates and the diagnostic log."""

import logging

import pytest

from trippin.models.forking import create_custom_fork, create_fork
from trippin.models.journey import JourneySource, JourneyStatus
from trippin.state.guards import (
    COMPLETION_EXEMPT,
    LOCKED_WHEN_COMPLETED,
    DiagnosticLog,
    GuardRejection,
    RejectionReason,
    check_active,
    check_completion_field,
    check_fork_only,
    check_transition,
    is_fork,
    is_template,
    target_id_of,
)


def test_exempt_and_locked_do_not_overlap() -> None:
    assert not COMPLETION_EXEMPT & LOCKED_WHEN_COMPLETED


def test_type_predicates(harbor: JourneySource) -> None:
    fork = create_fork(harbor)
    custom = create_custom_fork("Mine")
    assert is_fork(fork) and is_fork(custom)
    assert not is_fork(harbor)
    assert is_template(harbor) and not is_template(fork)


def test_target_id_of(harbor: JourneySource) -> None:
    assert target_id_of(harbor) == "harbor-walk"
    assert target_id_of("fork-1") == "fork-1"
    assert target_id_of(None) == "<none>"


class TestCheckForkOnly:
    def test_fork_passes(self, harbor: JourneySource) -> None:
        assert check_fork_only("rename", create_fork(harbor)) is None

    def test_template_rejected(self, harbor: JourneySource) -> None:
        rejection = check_fork_only("rename", harbor)
        assert rejection is not None
        assert rejection.reason == RejectionReason.NOT_A_FORK
        assert rejection.target_id == "harbor-walk"
        assert "template" in rejection.detail


class TestCheckActive:
    def test_active_passes(self) -> None:
        assert check_active("rename", "fork-1", "fork-1") is None

    @pytest.mark.parametrize("active", [None, "fork-2"])
    def test_other_or_none_rejected(self, active: str | None) -> None:
        rejection = check_active("rename", "fork-1", active)
        assert rejection is not None
        assert rejection.reason == RejectionReason.NOT_ACTIVE


class TestCheckCompletionField:
    """Completed forks accept only description and moment edits."""

    def _completed(self, harbor: JourneySource):
        fork = create_fork(harbor)
        fork.transition(JourneyStatus.COMPLETED)
        return fork

    @pytest.mark.parametrize("operation", sorted(LOCKED_WHEN_COMPLETED))
    def test_locked_operations(self, harbor: JourneySource, operation: str) -> None:
        rejection = check_completion_field(operation, self._completed(harbor))
        assert rejection is not None
        assert rejection.reason == RejectionReason.COMPLETED_LOCKED

    @pytest.mark.parametrize("operation", sorted(COMPLETION_EXEMPT))
    def test_exempt_operations(self, harbor: JourneySource, operation: str) -> None:
        assert check_completion_field(operation, self._completed(harbor)) is None

    def test_planned_fork_unrestricted(self, harbor: JourneySource) -> None:
        assert check_completion_field("rename", create_fork(harbor)) is None

    def test_unlisted_operation_rejected(self, harbor: JourneySource) -> None:
        rejection = check_completion_field("rewrite_history", self._completed(harbor))
        assert rejection is not None
        assert rejection.reason == RejectionReason.COMPLETED_LOCKED
        assert rejection.detail == "unlisted operation on a completed journey"

        locked = check_completion_field("rename", self._completed(harbor))
        assert locked is not None
        assert locked.detail == "journey is completed"


def test_check_transition(harbor: JourneySource) -> None:
    fork = create_fork(harbor)
    assert check_transition("start", fork, {JourneyStatus.PLANNED}) is None
    rejection = check_transition("stop", fork, {JourneyStatus.LIVE})
    assert rejection is not None
    assert rejection.reason == RejectionReason.INVALID_TRANSITION
    assert "planned" in rejection.detail


class TestDiagnosticLog:
    def test_records_and_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        log = DiagnosticLog()
        rejection = GuardRejection("rename", "fork-1", RejectionReason.NOT_ACTIVE)
        with caplog.at_level(logging.WARNING):
            log.record(rejection)
        assert log.last is rejection
        assert list(log) == [rejection]
        assert "rename rejected for fork-1: not_active" in caplog.text

    def test_bounded(self) -> None:
        log = DiagnosticLog(maxlen=2)
        for i in range(3):
            log.record(GuardRejection("op", f"fork-{i}", RejectionReason.NOT_FOUND))
        assert len(log) == 2
        assert [r.target_id for r in log] == ["fork-1", "fork-2"]

    def test_clear(self) -> None:
        log = DiagnosticLog()
        log.record(GuardRejection("op", "x", RejectionReason.NOT_FOUND))
        log.clear()
        assert len(log) == 0
        assert log.last is None
