"""Tests for versioned collection encoding and legacy migration."""

import json

import pytest

from trippin.models.journey import CustomOrigin, JourneyFork, JourneyStatus
from trippin.models.schema import (
    CURRENT_VERSIONS,
    MIGRATORS,
    InvalidSchemaError,
    MigrationNotFoundError,
    decode_records,
    encode_records,
    migrate_legacy_fork,
    read_schema_header,
    write_schema_fields,
)


class TestEncoding:
    def test_header_line_carries_schema(self) -> None:
        raw = encode_records("planner", [{"id": "fork-1"}])
        lines = raw.decode().splitlines()
        header = json.loads(lines[0])
        assert header["_schema"] == "planner"
        assert header["_version"] == CURRENT_VERSIONS["planner"]
        assert json.loads(lines[1]) == {"id": "fork-1"}

    def test_current_value_decodes_unchanged(self) -> None:
        records = [{"id": "fork-1"}, {"id": "fork-2"}]
        raw = encode_records("completed", records)
        assert decode_records("k", raw, "completed") == records

    def test_unknown_schema_type(self) -> None:
        with pytest.raises(ValueError):
            write_schema_fields("nope")

    def test_wrong_schema_type_is_rejected(self) -> None:
        raw = encode_records("planner", [])
        with pytest.raises(InvalidSchemaError):
            read_schema_header("k", raw, "completed")

    def test_corrupt_json_is_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError):
            decode_records("k", b"{not json", "planner")

    @pytest.mark.parametrize(
        "raw",
        [
            b'"just a string"\n',
            b"[1, 2]",
            b'{"_schema": "planner", "_version": "1.0"}\nnull\n',
        ],
    )
    def test_non_object_records_are_rejected(self, raw: bytes) -> None:
        with pytest.raises(InvalidSchemaError):
            decode_records("k", raw, "planner")

    def test_empty_value_is_legacy_and_empty(self) -> None:
        assert decode_records("k", b"", "planner") == []

    def test_unknown_version_has_no_migration(self) -> None:
        raw = b'{"_schema": "planner", "_version": "9.9"}\n'
        with pytest.raises(MigrationNotFoundError):
            decode_records("k", raw, "planner")

    def test_legacy_migrators_registered(self) -> None:
        for schema_type in CURRENT_VERSIONS:
            assert (schema_type, "0.0", "1.0") in MIGRATORS


class TestLegacyMigration:
    """Values written by the browser app: bare JSON arrays, camelCase keys."""

    def _legacy_fork(self, **overrides: object) -> dict[str, object]:
        data: dict[str, object] = {
            "id": "abc",
            "sourceJourneyId": "harbor-walk",
            "title": "Harbor Walk",
            "imageUrl": "https://example.com/h.jpg",
            "status": "LIVE",
            "clonedAt": 1_700_000_000_000,
            "isCompleted": False,
            "stops": [
                {
                    "id": "pier",
                    "name": "Pier",
                    "coordinates": [0.0, 0.0],
                    "imageUrl": "https://example.com/p.jpg",
                    "visited": True,
                }
            ],
        }
        data.update(overrides)
        return data

    def test_bare_array_migrates(self) -> None:
        raw = json.dumps([self._legacy_fork()]).encode()
        records = decode_records("trippin_planner_forks", raw, "planner")
        fork = JourneyFork.from_dict(records[0])
        assert fork.status == JourneyStatus.LIVE
        assert fork.source_journey_id == "harbor-walk"
        assert fork.image_url == "https://example.com/h.jpg"
        assert fork.stops[0].image_url == "https://example.com/p.jpg"
        assert fork.stops[0].visited is True
        assert fork.cloned_at.year == 2023

    def test_is_completed_flag_marks_completed(self) -> None:
        record = migrate_legacy_fork(
            self._legacy_fork(status="PLANNED", isCompleted=True, completedAt=None)
        )
        assert record["status"] == "completed"
        assert record["completed_at"] == record["cloned_at"]
        assert "isCompleted" not in record

    def test_self_referencing_source_becomes_custom(self) -> None:
        record = migrate_legacy_fork(self._legacy_fork(sourceJourneyId="abc"))
        fork = JourneyFork.from_dict(record)
        assert isinstance(fork.origin, CustomOrigin)

    def test_unknown_status_falls_back_to_planned(self) -> None:
        assert migrate_legacy_fork(self._legacy_fork(status="FOLLOWING"))["status"] == "planned"

    def test_iso_timestamps_with_z_suffix(self) -> None:
        record = migrate_legacy_fork(self._legacy_fork(clonedAt="2024-02-03T04:05:06Z"))
        assert record["cloned_at"] == "2024-02-03T04:05:06+00:00"

    def test_legacy_session_pointer(self) -> None:
        raw = b'{"liveJourneyId": "fork-1"}\n'
        assert decode_records("trippin_session", raw, "session") == [
            {"active_fork_id": "fork-1"}
        ]
