"""In-memory record store for projection inputs.

Holds the six record kinds the projection service reads (property models,
occupancy profiles, hot-water profiles, scenarios, journeys and assumptions
snapshots) keyed by id. Lookups hand back the stored record; a missing id
raises ``RecordNotFoundError`` naming the kind and id.
"""

from __future__ import annotations

from typing import Any, Iterable

RECORD_KINDS = (
    "property_models",
    "occupancy_profiles",
    "dhw_profiles",
    "scenarios",
    "journeys",
    "assumptions_snapshots",
)


class RecordNotFoundError(LookupError):
    """A referenced record does not exist."""

    def __init__(self, kind: str, record_id: Any):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} record not found: {record_id!r}")


class RecordStore:
    def __init__(self, records: dict[str, Iterable[dict]] | None = None):
        self._tables: dict[str, dict[str, dict]] = {kind: {} for kind in RECORD_KINDS}
        for kind, rows in (records or {}).items():
            for row in rows:
                self.add(kind, row)

    def _table(self, kind: str) -> dict[str, dict]:
        try:
            return self._tables[kind]
        except KeyError:
            raise KeyError(
                f"Unknown record kind '{kind}'. Available kinds: {list(RECORD_KINDS)}"
            )

    def add(self, kind: str, record: dict) -> dict:
        if "id" not in record:
            raise ValueError(f"{kind} record must carry an 'id'.")
        self._table(kind)[str(record["id"])] = record
        return record

    def get(self, kind: str, record_id: Any) -> dict:
        record = self._table(kind).get(str(record_id))
        if record is None:
            raise RecordNotFoundError(kind, record_id)
        return record

    def all(self, kind: str) -> list[dict]:
        return list(self._table(kind).values())
