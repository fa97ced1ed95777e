"""
SentinelFlow: supervised multi-stage handoff pipeline.

A finite-state engine that sequences planning, implementation, code review,
verification, test review, security audit and final review, carrying a
structured handoff record between worker personas and escalating to a human
when rejections repeat.

Example:
    import asyncio

    from sentinelflow import EngineConfig, StageOutput, create_engine
    from sentinelflow.domain.models import Plan
    from sentinelflow.infrastructure import (
        MockWorkerSwitcher,
        ScriptedHumanIntervention,
    )

    async def run():
        engine = create_engine(
            EngineConfig(max_verify_retries=3),
            worker_switcher=MockWorkerSwitcher(),
            human=ScriptedHumanIntervention([True]),
        )
        await engine.start()
        await engine.report_completion(StageOutput(plan=Plan(project_name="todo")))
        print(engine.get_context_summary())

    asyncio.run(run())
"""

# Application layer (orchestration)
from sentinelflow.application.engine import WorkflowEngine, create_engine
from sentinelflow.application.event_channel import EventChannel

# Domain configuration and events
from sentinelflow.domain.config import EngineConfig
from sentinelflow.domain.events import EngineEvent, EngineEventType

# Domain exceptions
from sentinelflow.domain.exceptions import (
    ConfigError,
    HandoffDecodeError,
    InvalidTransition,
    WorkerSwitchFailed,
)

# Domain interfaces (for custom collaborators)
from sentinelflow.domain.interfaces import (
    HandoffValidatorInterface,
    HumanInterventionInterface,
    SummaryWriterInterface,
    UINotifierInterface,
    WorkerSwitcherInterface,
)
from sentinelflow.domain.models import (
    EngineStatus,
    HandoffRecord,
    StageOutput,
    StageStatus,
    TransitionResult,
    ValidationError,
)
from sentinelflow.domain.serialization import deserialize, serialize
from sentinelflow.domain.stages import Stage
from sentinelflow.domain.validation import ValidationPolicy

__version__ = "0.1.0"

__all__ = [
    # Application
    "WorkflowEngine",
    "create_engine",
    "EventChannel",
    # Configuration
    "EngineConfig",
    "ValidationPolicy",
    # Models
    "Stage",
    "HandoffRecord",
    "StageOutput",
    "TransitionResult",
    "EngineStatus",
    "StageStatus",
    "ValidationError",
    "EngineEvent",
    "EngineEventType",
    # Wire format
    "serialize",
    "deserialize",
    # Interfaces
    "WorkerSwitcherInterface",
    "HumanInterventionInterface",
    "SummaryWriterInterface",
    "UINotifierInterface",
    "HandoffValidatorInterface",
    # Exceptions
    "InvalidTransition",
    "HandoffDecodeError",
    "WorkerSwitchFailed",
    "ConfigError",
]
