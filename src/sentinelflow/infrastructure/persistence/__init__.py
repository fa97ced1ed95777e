"""
Persistence adapters.

Handoff records are stored as JSON documents; engine events are logged in
memory or appended to a JSONL file.
"""

from sentinelflow.infrastructure.persistence.event_log import (
    InMemoryEventLog,
    JsonlEventLog,
)
from sentinelflow.infrastructure.persistence.filesystem import (
    FilesystemHandoffRepository,
)

__all__ = [
    "FilesystemHandoffRepository",
    "InMemoryEventLog",
    "JsonlEventLog",
]
