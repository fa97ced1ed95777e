"""
Domain layer for the handoff pipeline.

Contains the stage model, handoff records and transition rules with no
external dependencies.
"""

from sentinelflow.domain.config import EngineConfig
from sentinelflow.domain.events import EngineEvent, EngineEventType
from sentinelflow.domain.exceptions import (
    ConfigError,
    HandoffDecodeError,
    HandoffValidationFailed,
    InvalidTransition,
    WorkerSwitchFailed,
)
from sentinelflow.domain.handoff import (
    create_handoff_record,
    derive_handoff_record,
    merge_output,
)
from sentinelflow.domain.interfaces import (
    HandoffValidatorInterface,
    HumanInterventionInterface,
    SummaryWriterInterface,
    UINotifierInterface,
    WorkerSwitcherInterface,
)
from sentinelflow.domain.models import (
    AuditRecommendation,
    AuditResult,
    CodeReview,
    EngineStatus,
    FailureRecord,
    FinalReview,
    HandoffRecord,
    ImplementationContext,
    Plan,
    PlanTask,
    RecordStatus,
    StageOutput,
    StageStatus,
    TestReview,
    TransitionResult,
    ValidationError,
    VerificationResult,
)
from sentinelflow.domain.serialization import (
    deserialize,
    record_from_dict,
    record_to_dict,
    serialize,
    stage_output_from_dict,
)
from sentinelflow.domain.stages import Stage
from sentinelflow.domain.summary import summarize, summarize_for_ui
from sentinelflow.domain.transitions import TRANSITIONS, check_transition, next_stage
from sentinelflow.domain.validation import (
    PermissiveValidator,
    RequiredPayloadValidator,
    ValidationPolicy,
    make_validator,
)

__all__ = [
    # Stages and models
    "Stage",
    "RecordStatus",
    "AuditRecommendation",
    "HandoffRecord",
    "FailureRecord",
    "StageOutput",
    "Plan",
    "PlanTask",
    "ImplementationContext",
    "VerificationResult",
    "AuditResult",
    "CodeReview",
    "TestReview",
    "FinalReview",
    "ValidationError",
    "TransitionResult",
    "EngineStatus",
    "StageStatus",
    "EngineConfig",
    # Events
    "EngineEvent",
    "EngineEventType",
    # Record store
    "create_handoff_record",
    "derive_handoff_record",
    "merge_output",
    "serialize",
    "deserialize",
    "record_to_dict",
    "record_from_dict",
    "stage_output_from_dict",
    "summarize",
    "summarize_for_ui",
    # Validation
    "ValidationPolicy",
    "PermissiveValidator",
    "RequiredPayloadValidator",
    "make_validator",
    # Transitions
    "TRANSITIONS",
    "check_transition",
    "next_stage",
    # Interfaces
    "WorkerSwitcherInterface",
    "HumanInterventionInterface",
    "SummaryWriterInterface",
    "UINotifierInterface",
    "HandoffValidatorInterface",
    # Exceptions
    "InvalidTransition",
    "HandoffValidationFailed",
    "WorkerSwitchFailed",
    "HandoffDecodeError",
    "ConfigError",
]
