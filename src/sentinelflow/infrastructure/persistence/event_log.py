"""Engine event logs; both are channel listeners."""

import json
from pathlib import Path
from typing import Any

from sentinelflow.domain.events import EngineEvent, EngineEventType
from sentinelflow.domain.serialization import (
    format_timestamp,
    parse_timestamp,
    record_from_dict,
    record_to_dict,
)
from sentinelflow.domain.stages import Stage


class InMemoryEventLog:
    """In-memory implementation for testing."""

    def __init__(self) -> None:
        self._events: list[EngineEvent] = []

    def __call__(self, event: EngineEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> list[EngineEvent]:
        return list(self._events)

    def of_type(self, event_type: EngineEventType) -> list[EngineEvent]:
        return [e for e in self._events if e.event_type == event_type]

    def stages(self) -> list[Stage]:
        """Target stage of every committed transition, in order."""
        return [e.to_stage for e in self.of_type(EngineEventType.TRANSITION)]


class JsonlEventLog:
    """Appends events to a JSONL file, one object per line."""

    def __init__(self, path: str | Path, include_records: bool = True) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._include_records = include_records

    def __call__(self, event: EngineEvent) -> None:
        with open(self.path, "a") as f:
            f.write(json.dumps(self._event_to_dict(event)) + "\n")

    def read(self, event_type: EngineEventType | None = None) -> list[EngineEvent]:
        if not self.path.exists():
            return []
        events: list[EngineEvent] = []
        with open(self.path) as f:
            for line in f:
                if not line.strip():
                    continue
                event = self._dict_to_event(json.loads(line))
                if event_type and event.event_type != event_type:
                    continue
                events.append(event)
        return events

    def _event_to_dict(self, event: EngineEvent) -> dict[str, Any]:
        """Serialize event to dict."""
        data: dict[str, Any] = {
            "event_type": event.event_type.value,
            "from_stage": event.from_stage.value,
            "to_stage": event.to_stage.value,
            "message": event.message,
            "created_at": format_timestamp(event.created_at),
            "record_id": event.record.record_id if event.record else None,
            "attempt_number": event.record.attempt_number if event.record else None,
        }
        if self._include_records and event.record is not None:
            data["record"] = record_to_dict(event.record)
        return data

    def _dict_to_event(self, data: dict[str, Any]) -> EngineEvent:
        """Deserialize dict to event."""
        record = None
        if data.get("record"):
            record = record_from_dict(data["record"])
        return EngineEvent(
            event_type=EngineEventType(data["event_type"]),
            from_stage=Stage(data["from_stage"]),
            to_stage=Stage(data["to_stage"]),
            record=record,
            message=data.get("message", ""),
            created_at=parse_timestamp(data["created_at"]),
        )
