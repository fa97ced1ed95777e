"""
Domain interfaces (Ports) for the handoff pipeline.

The engine talks to everything outside the state machine through these
abstract base classes. Implementations live in the infrastructure layer or
in the host application.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sentinelflow.domain.models import (
        HandoffRecord,
        StageStatus,
        ValidationError,
    )
    from sentinelflow.domain.stages import Stage


class WorkerSwitcherInterface(ABC):
    """
    Port for activating the worker persona of a stage.

    Called once per committed transition into a stage that has a worker.
    A failure aborts the transition.
    """

    @abstractmethod
    async def switch_to(self, worker_id: str) -> None:
        """
        Activate the worker for the next stage.

        Args:
            worker_id: Persona identifier (e.g. 'planner', 'auditor')

        Raises:
            Exception: Any failure; the engine does not commit the transition
        """
        pass


class HumanInterventionInterface(ABC):
    """
    Port for escalation decisions.

    Asked once per escalation after a retry limit is reached.
    """

    @abstractmethod
    async def ask(self, reason: str, record: "HandoffRecord") -> bool:
        """
        Args:
            reason: Human-readable explanation, includes the rejection count
            record: Current record, already marked blocked

        Returns:
            True to resume at the implementer, False to halt in BLOCKED
        """
        pass


class SummaryWriterInterface(ABC):
    """Port for producing the run summary artifact on completion."""

    @abstractmethod
    async def write(self, record: "HandoffRecord") -> str:
        """
        Args:
            record: Final record of the run

        Returns:
            Location of the written artifact
        """
        pass


class UINotifierInterface(ABC):
    """Port for the status display. Receives a status on every event."""

    @abstractmethod
    def notify(self, status: "StageStatus") -> None:
        pass


class HandoffValidatorInterface(ABC):
    """
    Strategy deciding whether a record may enter a stage.

    Returning an empty list allows the transition.
    """

    @abstractmethod
    def validate(
        self, record: "HandoffRecord", target: "Stage"
    ) -> list["ValidationError"]:
        pass
