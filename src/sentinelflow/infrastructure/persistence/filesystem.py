"""
Filesystem repository for handoff records.

Every derived record is kept as its own JSON document, so the chain of
handoffs for a run can be inspected after the fact.
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from sentinelflow.domain.events import EngineEvent
from sentinelflow.domain.exceptions import HandoffDecodeError
from sentinelflow.domain.models import HandoffRecord
from sentinelflow.domain.serialization import record_from_dict, record_to_dict
from sentinelflow.schemas import validate_handoff

logger = logging.getLogger(__name__)


class FilesystemHandoffRepository:
    """
    Persistent, append-only store of handoff records.

    Layout::

        base_dir/
            index.json              # record ids in save order
            records/{id}.json       # one document per record
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)
        self._records_dir = self._base_dir / "records"
        self._index_path = self._base_dir / "index.json"
        self._index: dict[str, Any] = self._load_or_create_index()

    def _load_or_create_index(self) -> dict[str, Any]:
        self._records_dir.mkdir(parents=True, exist_ok=True)
        if self._index_path.exists():
            with open(self._index_path) as f:
                result: dict[str, Any] = json.load(f)
                return result
        return {"version": "1.0", "records": []}

    def _write_atomic(self, path: Path, data: dict[str, Any]) -> None:
        """Write JSON using write-to-temp + rename."""
        temp_path = path.with_suffix(".tmp")
        with open(temp_path, "w") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        temp_path.replace(path)

    def _record_path(self, record_id: str) -> Path:
        return self._records_dir / f"{record_id}.json"

    def save(self, record: HandoffRecord) -> str:
        """
        Store a record. Saving the same id again overwrites its document
        but keeps its original position in the index.

        Returns:
            The record_id
        """
        self._write_atomic(self._record_path(record.record_id), record_to_dict(record))
        if record.record_id not in self._index["records"]:
            self._index["records"].append(record.record_id)
            self._write_atomic(self._index_path, self._index)
        logger.debug("Saved handoff record %s", record.record_id)
        return record.record_id

    def load(self, record_id: str) -> HandoffRecord:
        """
        Raises:
            KeyError: If the record is not stored
            HandoffDecodeError: If the stored document is malformed
        """
        path = self._record_path(record_id)
        if not path.exists():
            raise KeyError(f"Handoff record not found: {record_id}")
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise HandoffDecodeError(f"Corrupt record file {path}: {e}") from e
        try:
            validate_handoff(data)
        except jsonschema.ValidationError as e:
            raise HandoffDecodeError(
                f"Record {record_id} does not match schema: {e.message}"
            ) from e
        return record_from_dict(data)

    def record_ids(self) -> list[str]:
        """All stored ids, oldest first."""
        return list(self._index["records"])

    def history(self) -> list[HandoffRecord]:
        return [self.load(record_id) for record_id in self._index["records"]]

    def latest(self) -> HandoffRecord | None:
        if not self._index["records"]:
            return None
        return self.load(self._index["records"][-1])

    def __call__(self, event: EngineEvent) -> None:
        """Event listener: persist the record carried by an event."""
        if event.record is not None:
            self.save(event.record)
