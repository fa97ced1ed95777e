"""
WorkflowEngine: finite-state machine sequencing the supervised pipeline.

Owns the current stage, the current handoff record, and the two rejection
counters that drive escalation. One engine instance per run.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from sentinelflow.application.event_channel import EventChannel, EventListener
from sentinelflow.application.ui_status import UIStatusProjector
from sentinelflow.domain.config import EngineConfig
from sentinelflow.domain.events import EngineEvent, EngineEventType
from sentinelflow.domain.exceptions import (
    HandoffDecodeError,
    HandoffValidationFailed,
    InvalidTransition,
    WorkerSwitchFailed,
)
from sentinelflow.domain.handoff import (
    copy_record,
    create_handoff_record,
    derive_handoff_record,
    merge_output,
    retarget,
    utc_now,
    with_failure,
)
from sentinelflow.domain.interfaces import (
    HandoffValidatorInterface,
    HumanInterventionInterface,
    SummaryWriterInterface,
    UINotifierInterface,
    WorkerSwitcherInterface,
)
from sentinelflow.domain.models import (
    EngineStatus,
    FailureRecord,
    HandoffRecord,
    RecordStatus,
    StageOutput,
    TransitionResult,
    ValidationError,
)
from sentinelflow.domain.serialization import stage_output_from_dict
from sentinelflow.domain.stages import Stage, is_loop_back, worker_for
from sentinelflow.domain.summary import summarize
from sentinelflow.domain.transitions import check_transition, next_stage
from sentinelflow.domain.validation import make_validator

logger = logging.getLogger(__name__)

# Loop-backs out of these stages count against the respective retry limit.
_VERIFY_PHASE = frozenset({Stage.VERIFYING, Stage.REVIEW_TESTS})
_AUDIT_PHASE = frozenset({Stage.AUDITING})


class WorkflowEngine:
    """
    Sequences stages, carries the handoff record, escalates on repeated failure.

    ``start``, ``transition``, ``report_completion`` and ``reset`` are
    serialized by a single asyncio lock held across the awaits on the
    collaborator ports, so one operation runs to completion before the next
    begins. Events are emitted only after the state they report is committed.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        worker_switcher: WorkerSwitcherInterface | None = None,
        human: HumanInterventionInterface | None = None,
        summary_writer: SummaryWriterInterface | None = None,
        ui_notifier: UINotifierInterface | None = None,
        validator: HandoffValidatorInterface | None = None,
    ):
        """
        Args:
            config: Retry limits and validation policy (defaults if None)
            worker_switcher: Activates the worker persona per stage
            human: Escalation decision maker; without one, escalation halts
            summary_writer: Produces the run summary on completion
            ui_notifier: Receives a StageStatus; registered as first listener
            validator: Overrides the validator chosen by the config policy
        """
        self._config = config or EngineConfig()
        self._validator = validator or make_validator(self._config.validation_policy)
        self._worker_switcher = worker_switcher
        self._human = human
        self._summary_writer = summary_writer

        self._stage = Stage.IDLE
        self._record: HandoffRecord | None = None
        self._verify_reject_count = 0
        self._audit_reject_count = 0

        self._channel = EventChannel()
        if ui_notifier is not None:
            self._channel.add(UIStatusProjector(ui_notifier))
        self._lock = asyncio.Lock()

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def record(self) -> HandoffRecord | None:
        """Snapshot of the current record; changes to it do not reach the engine."""
        if self._record is None:
            return None
        return copy_record(self._record)

    @property
    def verify_reject_count(self) -> int:
        return self._verify_reject_count

    @property
    def audit_reject_count(self) -> int:
        return self._audit_reject_count

    @property
    def is_active(self) -> bool:
        return self._stage not in (Stage.IDLE, Stage.COMPLETED)

    @property
    def current_worker(self) -> str | None:
        return worker_for(self._stage)

    def get_status(self) -> EngineStatus:
        return EngineStatus(
            stage=self._stage,
            is_active=self.is_active,
            verify_reject_count=self._verify_reject_count,
            audit_reject_count=self._audit_reject_count,
            has_record=self._record is not None,
            record_id=self._record.record_id if self._record else None,
            attempt_number=self._record.attempt_number if self._record else None,
        )

    def get_context_summary(self) -> str:
        """Digest of the current record for worker prompts ('' if none)."""
        if self._record is None:
            return ""
        return summarize(self._record)

    def add_listener(self, listener: EventListener) -> None:
        self._channel.add(listener)

    def remove_listener(self, listener: EventListener) -> None:
        self._channel.remove(listener)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def start(self) -> TransitionResult:
        """Enter PLANNING. Only valid from IDLE."""
        async with self._lock:
            if self._stage != Stage.IDLE:
                return self._fail(
                    self._stage,
                    self._stage,
                    "Engine already active. Call reset() first.",
                )
            return await self._transition(Stage.PLANNING, self._record)

    async def transition(self, target: Stage) -> TransitionResult:
        """Move to ``target`` if the transition table allows it."""
        async with self._lock:
            return await self._transition(target, self._record)

    async def report_completion(
        self, output: StageOutput | Mapping[str, Any]
    ) -> TransitionResult:
        """
        A stage finished; merge its output and move to the computed next stage.

        Args:
            output: Stage output, or its wire-shaped dict

        Returns:
            TransitionResult; on escalation the result reflects the human
            decision (resumed at IMPLEMENTING, or failed into BLOCKED)
        """
        async with self._lock:
            from_stage = self._stage

            if isinstance(output, Mapping):
                try:
                    output = stage_output_from_dict(dict(output))
                except HandoffDecodeError as e:
                    return self._fail(from_stage, from_stage, str(e))

            target = next_stage(from_stage, output)
            if target is None:
                return self._fail(
                    from_stage,
                    from_stage,
                    f"No next stage from {from_stage.value}. Call reset() first.",
                )

            if self._record is None:
                candidate = merge_output(
                    create_handoff_record(from_stage, target), output
                )
            else:
                candidate = derive_handoff_record(
                    self._record, output, from_stage, target
                )

            verify_count = self._verify_reject_count
            audit_count = self._audit_reject_count
            retry_message = ""

            if is_loop_back(from_stage, target):
                if from_stage in _VERIFY_PHASE:
                    verify_count += 1
                    limit = self._config.max_verify_retries
                    logger.warning("Verification rejection %d/%d", verify_count, limit)
                    if verify_count >= limit:
                        self._verify_reject_count = verify_count
                        return await self._escalate(
                            f"Verification rejected {verify_count} times "
                            f"(limit {limit}). Human intervention required.",
                            candidate,
                        )
                    retry_message = f"Verification rejected ({verify_count}/{limit})"
                elif from_stage in _AUDIT_PHASE:
                    audit_count += 1
                    limit = self._config.max_audit_retries
                    logger.warning("Security audit rejection %d/%d", audit_count, limit)
                    if audit_count >= limit:
                        self._audit_reject_count = audit_count
                        return await self._escalate(
                            f"Security audit rejected {audit_count} times "
                            f"(limit {limit}). Human intervention required.",
                            candidate,
                        )
                    retry_message = f"Security audit rejected ({audit_count}/{limit})"

            if target == Stage.AUDITING:
                verify_count = 0
            if target == Stage.COMPLETED:
                audit_count = 0

            result = await self._transition(
                target, candidate, counters=(verify_count, audit_count)
            )
            if result.success and retry_message:
                self._channel.emit(
                    EngineEvent(
                        event_type=EngineEventType.RETRY,
                        from_stage=from_stage,
                        to_stage=target,
                        record=result.record,
                        message=retry_message,
                    )
                )
            return result

    async def reset(self) -> None:
        """Back to IDLE: clears the record and both counters."""
        async with self._lock:
            from_stage = self._stage
            self._stage = Stage.IDLE
            self._record = None
            self._verify_reject_count = 0
            self._audit_reject_count = 0
            logger.info("Engine reset from %s", from_stage.value)
            self._channel.emit(
                EngineEvent(
                    event_type=EngineEventType.TRANSITION,
                    from_stage=from_stage,
                    to_stage=Stage.IDLE,
                    message="reset",
                )
            )

    def force_stage(self, stage: Stage) -> None:
        """Unchecked override for tests and recovery. Emits nothing."""
        logger.warning("Force stage change: %s -> %s", self._stage.value, stage.value)
        self._stage = stage

    # =========================================================================
    # INTERNALS (lock held)
    # =========================================================================

    async def _transition(
        self,
        target: Stage,
        record: HandoffRecord | None,
        *,
        checked: bool = True,
        label: str = "",
        counters: tuple[int, int] | None = None,
    ) -> TransitionResult:
        from_stage = self._stage

        try:
            if checked:
                label = check_transition(from_stage, target, record)
            candidate = self._prepare(from_stage, target, record)
        except InvalidTransition as e:
            logger.warning("%s", e)
            return self._fail(from_stage, target, str(e))
        except HandoffValidationFailed as e:
            logger.warning("%s", e)
            return self._fail(
                from_stage, target, str(e), validation_errors=tuple(e.errors)
            )

        worker_id = worker_for(target)
        if worker_id is not None and self._worker_switcher is not None:
            try:
                await self._worker_switcher.switch_to(worker_id)
            except Exception as e:
                failure = WorkerSwitchFailed(worker_id, e)
                logger.exception("%s", failure)
                return self._fail(from_stage, target, str(failure))

        # Commit
        self._stage = target
        self._record = candidate
        if counters is not None:
            self._verify_reject_count, self._audit_reject_count = counters
        logger.info(
            "Transition %s -> %s (attempt %d)",
            from_stage.value,
            target.value,
            candidate.attempt_number,
        )

        self._channel.emit(
            EngineEvent(
                event_type=EngineEventType.TRANSITION,
                from_stage=from_stage,
                to_stage=target,
                record=candidate,
                message=label,
            )
        )

        if target == Stage.COMPLETED:
            self._channel.emit(
                EngineEvent(
                    event_type=EngineEventType.COMPLETED,
                    from_stage=from_stage,
                    to_stage=target,
                    record=candidate,
                )
            )
            await self._write_summary(candidate)

        return TransitionResult(
            success=True, from_stage=from_stage, to_stage=target, record=candidate
        )

    def _prepare(
        self, from_stage: Stage, target: Stage, record: HandoffRecord | None
    ) -> HandoffRecord:
        """Candidate record for ``target``.

        Raises:
            HandoffValidationFailed: If the validator rejects the candidate
        """
        status = (
            RecordStatus.COMPLETED if target == Stage.COMPLETED else RecordStatus.IN_PROGRESS
        )
        if record is None:
            candidate = create_handoff_record(from_stage, target)
            candidate.status = status
        else:
            candidate = retarget(record, from_stage, target, status)

        errors = self._validator.validate(candidate, target)
        if errors:
            raise HandoffValidationFailed(target, errors)
        return candidate

    async def _escalate(self, reason: str, record: HandoffRecord) -> TransitionResult:
        """Record the failure, ask a human, then resume or block."""
        from_stage = self._stage
        failure = FailureRecord(
            stage=from_stage,
            timestamp=utc_now(),
            reason=reason,
            details="Max retry limit reached",
        )
        blocked = retarget(
            with_failure(record, failure), from_stage, Stage.BLOCKED, RecordStatus.BLOCKED
        )
        self._record = blocked
        logger.warning("Escalating from %s: %s", from_stage.value, reason)

        if await self._ask_human(reason, blocked):
            logger.info("Human intervention: resume at implementing")
            resumed = await self._transition(
                Stage.IMPLEMENTING,
                blocked,
                checked=False,
                label="Resumed after human intervention",
                counters=(0, 0),
            )
            if resumed.success:
                return resumed
            # The blocked record is already committed; the stage must follow it.
            logger.warning("Resume failed, halting: %s", resumed.error)
        else:
            logger.info("Human intervention: halt")

        self._stage = Stage.BLOCKED
        self._channel.emit(
            EngineEvent(
                event_type=EngineEventType.BLOCKED,
                from_stage=from_stage,
                to_stage=Stage.BLOCKED,
                record=blocked,
                message=reason,
            )
        )
        return TransitionResult(
            success=False,
            from_stage=from_stage,
            to_stage=Stage.BLOCKED,
            record=blocked,
            error=reason,
        )

    async def _ask_human(self, reason: str, record: HandoffRecord) -> bool:
        if self._human is None:
            return False
        try:
            return bool(await self._human.ask(reason, record))
        except Exception:
            logger.exception("Human intervention prompt failed; treating as halt")
            return False

    async def _write_summary(self, record: HandoffRecord) -> None:
        if self._summary_writer is None:
            return
        try:
            location = await self._summary_writer.write(record)
        except Exception as e:
            logger.exception("Summary writer failed")
            self._channel.emit(
                EngineEvent(
                    event_type=EngineEventType.ERROR,
                    from_stage=Stage.COMPLETED,
                    to_stage=Stage.COMPLETED,
                    record=record,
                    message=f"Summary writer failed: {e}",
                )
            )
            return
        logger.info("Run summary written to %s", location)

    def _fail(
        self,
        from_stage: Stage,
        to_stage: Stage,
        error: str,
        validation_errors: tuple[ValidationError, ...] = (),
    ) -> TransitionResult:
        self._channel.emit(
            EngineEvent(
                event_type=EngineEventType.ERROR,
                from_stage=from_stage,
                to_stage=to_stage,
                record=self._record,
                message=error,
            )
        )
        return TransitionResult(
            success=False,
            from_stage=from_stage,
            to_stage=to_stage,
            record=self._record,
            error=error,
            validation_errors=validation_errors,
        )


def create_engine(
    config: EngineConfig | None = None, **ports: Any
) -> WorkflowEngine:
    """Create an engine for one run. Keyword ports as for WorkflowEngine."""
    return WorkflowEngine(config, **ports)
