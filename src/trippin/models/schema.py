"""Schema versioning for persisted journey collections.

Every collection value is a JSONL document: a header line carrying the
schema type and version, then one record per line. Versioned headers give us:
- Format validation on load
- Automatic migration of legacy values
- A guard against loading one collection's value as another's

Schema Types:
- planner: Forks with status planned or live
- completed: Forks with status completed
- session: Active fork pointer
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable

logger = logging.getLogger(__name__)

# Current schema versions
CURRENT_VERSIONS: dict[str, str] = {
    "planner": "1.0",
    "completed": "1.0",
    "session": "1.0",
}

Record = dict[str, Any]


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    pass


class MigrationNotFoundError(SchemaError):
    """Raised when no migration path exists."""

    def __init__(self, schema_type: str, from_version: str, to_version: str) -> None:
        self.schema_type = schema_type
        self.from_version = from_version
        self.to_version = to_version
        super().__init__(
            f"No migration for {schema_type} from {from_version} to {to_version}"
        )


class InvalidSchemaError(SchemaError):
    """Raised when schema validation fails."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"Invalid schema in {key}: {message}")


@dataclass
class SchemaHeader:
    """Parsed schema header of a stored collection."""

    schema_type: str
    schema_version: str

    @property
    def is_legacy(self) -> bool:
        """Check if this is a legacy value (version 0.0)."""
        return self.schema_version == "0.0"

    @property
    def is_current(self) -> bool:
        """Check if this value is at the current version."""
        current = CURRENT_VERSIONS.get(self.schema_type)
        return self.schema_version == current


def write_schema_fields(schema_type: str) -> dict[str, str]:
    """Get schema fields to include in header.

    Raises:
        ValueError: If schema_type is unknown.
    """
    if schema_type not in CURRENT_VERSIONS:
        raise ValueError(f"Unknown schema type: {schema_type}")

    return {
        "_schema": schema_type,
        "_version": CURRENT_VERSIONS[schema_type],
    }


def encode_records(schema_type: str, records: list[Record]) -> bytes:
    """Serialize records to a versioned JSONL document."""
    header = {
        **write_schema_fields(schema_type),
        "updated_at": datetime.now(UTC).isoformat(),
    }
    lines = [json.dumps(header)]
    lines.extend(json.dumps(record) for record in records)
    return ("\n".join(lines) + "\n").encode("utf-8")


def _parse(key: str, raw: bytes) -> tuple[Record | None, list[Record]]:
    """Split a stored value into (header, records).

    Legacy values are either a bare JSON array (as written by the browser
    app) or JSONL without a header; both come back with a None header.
    """
    try:
        text = raw.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise InvalidSchemaError(key, f"Not UTF-8: {e}") from e
    if not text:
        return None, []

    try:
        if text.startswith("["):
            data = json.loads(text)
            if not isinstance(data, list):
                raise InvalidSchemaError(key, "Expected a list of records")
            records = data
        else:
            records = [json.loads(line) for line in text.splitlines() if line.strip()]
    except json.JSONDecodeError as e:
        raise InvalidSchemaError(key, f"Invalid JSON: {e}") from e

    for record in records:
        if not isinstance(record, dict):
            raise InvalidSchemaError(
                key, f"Expected a JSON object, got {type(record).__name__}"
            )

    if text.startswith("["):
        return None, records
    if records and "_schema" in records[0]:
        return records[0], records[1:]
    return None, records


def read_schema_header(key: str, raw: bytes, expected_type: str) -> SchemaHeader:
    """Read and validate the schema header of a stored value.

    Returns:
        SchemaHeader with version "0.0" for legacy values without schema fields.

    Raises:
        InvalidSchemaError: If the value is corrupt or has wrong schema type.
    """
    header, _ = _parse(key, raw)
    if header is None:
        logger.debug("Legacy value detected (no schema fields): %s", key)
        return SchemaHeader(schema_type=expected_type, schema_version="0.0")

    schema_type = header.get("_schema")
    schema_version = header.get("_version")
    if schema_type != expected_type:
        raise InvalidSchemaError(
            key, f"Expected schema '{expected_type}', got '{schema_type}'"
        )
    return SchemaHeader(schema_type=expected_type, schema_version=str(schema_version))


# Migration registry
Migrator = Callable[[list[Record]], list[Record]]
MIGRATORS: dict[tuple[str, str, str], Migrator] = {}


def register_migrator(
    schema_type: str, from_version: str, to_version: str
) -> Callable[[Migrator], Migrator]:
    """Decorator to register a migration function.

    Example:
        @register_migrator("planner", "1.0", "2.0")
        def migrate_planner_1_to_2(records):
            ...
    """

    def decorator(fn: Migrator) -> Migrator:
        key = (schema_type, from_version, to_version)
        MIGRATORS[key] = fn
        logger.debug(
            "Registered migrator: %s %s -> %s", schema_type, from_version, to_version
        )
        return fn

    return decorator


def decode_records(key: str, raw: bytes, schema_type: str) -> list[Record]:
    """Parse a stored value, migrating it to the current version if needed.

    Raises:
        MigrationNotFoundError: If no migration path exists.
        InvalidSchemaError: If the value is corrupt.
    """
    header = read_schema_header(key, raw, schema_type)
    _, records = _parse(key, raw)

    if header.is_current:
        return records

    current_version = CURRENT_VERSIONS[schema_type]
    migrator = MIGRATORS.get((schema_type, header.schema_version, current_version))
    if migrator is None:
        raise MigrationNotFoundError(
            schema_type, header.schema_version, current_version
        )

    logger.info(
        "Migrating %s from %s to %s: %s",
        schema_type,
        header.schema_version,
        current_version,
        key,
    )
    return migrator(records)


# =============================================================================
# Legacy Migrations (0.0 -> 1.0)
# =============================================================================

_LEGACY_KEYS = {
    "imageUrl": "image_url",
    "clonedAt": "cloned_at",
    "completedAt": "completed_at",
    "sourceJourneyId": "source_journey_id",
    "liveJourneyId": "active_fork_id",
}


def _legacy_timestamp(value: Any) -> str | None:
    """Legacy timestamps are epoch milliseconds or ISO strings."""
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, UTC).isoformat()
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).isoformat()


def _rename_keys(data: Record) -> Record:
    return {_LEGACY_KEYS.get(k, k): v for k, v in data.items()}


def migrate_legacy_fork(data: Record) -> Record:
    """Normalize a fork record written by the browser app.

    - camelCase keys become snake_case
    - `isCompleted`/`isFollowing` flags are dropped; status is authoritative,
      although a legacy `isCompleted: true` still marks the fork completed
    - a custom journey whose `sourceJourneyId` points at itself loses the
      self reference and becomes a custom origin
    - epoch millisecond timestamps become ISO strings
    """
    record = _rename_keys(data)
    is_completed = bool(record.pop("isCompleted", False))
    record.pop("isFollowing", None)
    is_custom = bool(record.pop("isCustom", record.pop("is_custom", False)))

    source_id = record.get("source_journey_id")
    if is_custom or not source_id or source_id == record.get("id"):
        record.pop("source_journey_id", None)
        record["is_custom"] = True

    status = str(record.get("status", "PLANNED")).lower()
    if status not in {"planned", "live", "completed"}:
        status = "planned"
    if is_completed:
        status = "completed"
    record["status"] = status

    cloned_at = _legacy_timestamp(record.get("cloned_at"))
    record["cloned_at"] = cloned_at or datetime.now(UTC).isoformat()
    record["completed_at"] = _legacy_timestamp(record.get("completed_at"))
    if status == "completed" and record["completed_at"] is None:
        record["completed_at"] = record["cloned_at"]

    record["stops"] = [_rename_keys(stop) for stop in record.get("stops") or []]
    record["moments"] = [_rename_keys(m) for m in record.get("moments") or []]
    return record


@register_migrator("planner", "0.0", "1.0")
def _migrate_planner_legacy(records: list[Record]) -> list[Record]:
    return [migrate_legacy_fork(record) for record in records]


@register_migrator("completed", "0.0", "1.0")
def _migrate_completed_legacy(records: list[Record]) -> list[Record]:
    return [migrate_legacy_fork(record) for record in records]


@register_migrator("session", "0.0", "1.0")
def _migrate_session_legacy(records: list[Record]) -> list[Record]:
    """Legacy session values held just the live journey id."""
    return [_rename_keys(record) for record in records]
