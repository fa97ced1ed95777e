"""Synchronous fan-out of engine events to registered listeners."""

import logging
import threading
from collections.abc import Callable

from sentinelflow.domain.events import EngineEvent

logger = logging.getLogger(__name__)

EventListener = Callable[[EngineEvent], None]


class EventChannel:
    """Ordered registry of independent event listeners.

    Listeners run in registration order. A listener that raises is logged
    and skipped; delivery to the remaining listeners continues.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []
        self._lock = threading.Lock()

    def add(self, listener: EventListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove(self, listener: EventListener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def listeners(self) -> tuple[EventListener, ...]:
        with self._lock:
            return tuple(self._listeners)

    def emit(self, event: EngineEvent) -> None:
        for listener in self.listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Event listener %r failed on %s event",
                    listener,
                    event.event_type.value,
                )
