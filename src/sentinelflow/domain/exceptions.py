"""
Domain exceptions for the handoff pipeline.

The engine converts InvalidTransition, HandoffValidationFailed and
WorkerSwitchFailed into failed TransitionResults at its public boundary.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sentinelflow.domain.models import ValidationError
    from sentinelflow.domain.stages import Stage


class InvalidTransition(Exception):
    """Raised when (from, to) is not in the transition table or its guard fails."""

    def __init__(self, from_stage: "Stage", to_stage: "Stage", reason: str = ""):
        """
        Args:
            from_stage: Stage the engine is in
            to_stage: Stage that was requested
            reason: Optional detail (failed guard label, terminal stage, ...)
        """
        message = f"Invalid transition from {from_stage.value} to {to_stage.value}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.from_stage = from_stage
        self.to_stage = to_stage
        self.reason = reason


class HandoffValidationFailed(Exception):
    """Raised when the active validator rejects a record for a target stage."""

    def __init__(self, target: "Stage", errors: list["ValidationError"]):
        joined = ", ".join(str(e) for e in errors)
        super().__init__(f"Handoff validation failed for {target.value}: {joined}")
        self.target = target
        self.errors = errors


class WorkerSwitchFailed(Exception):
    """Raised when the worker switcher could not activate the next persona.

    The active persona is load-bearing, so the transition is aborted.
    """

    def __init__(self, worker_id: str, cause: BaseException):
        super().__init__(f"Failed to switch to worker '{worker_id}': {cause}")
        self.worker_id = worker_id
        self.cause = cause


class HandoffDecodeError(Exception):
    """Raised when serialized handoff data cannot be decoded."""

    pass


class ConfigError(Exception):
    """Raised when engine configuration is invalid."""

    pass
