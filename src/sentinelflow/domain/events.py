"""Engine event models published on the event channel."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from sentinelflow.domain.models import HandoffRecord
from sentinelflow.domain.stages import Stage


class EngineEventType(str, Enum):
    """Types of engine events."""

    TRANSITION = "transition"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    ERROR = "error"
    RETRY = "retry"


@dataclass(frozen=True)
class EngineEvent:
    """Single observable engine occurrence.

    Emitted only after the state it describes has been committed.
    """

    event_type: EngineEventType
    from_stage: Stage
    to_stage: Stage
    record: HandoffRecord | None = None
    message: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
