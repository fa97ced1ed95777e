"""
Transition table and next-stage routing.

Two separate concerns:

- ``next_stage`` decides where the pipeline goes after a stage reports its
  output. It is a pure function of (stage, output).
- ``TRANSITIONS`` is the safety net applied to every move. Each row is
  guarded by a predicate over the record that would enter the target stage.

Moving into PLANNING is always allowed from a non-terminal stage, so any
stage can send the run back to re-planning.
"""

from collections.abc import Callable
from dataclasses import dataclass

from sentinelflow.domain.exceptions import InvalidTransition
from sentinelflow.domain.models import HandoffRecord, StageOutput
from sentinelflow.domain.stages import TERMINAL_STAGES, Stage

Guard = Callable[[HandoffRecord | None], bool]


@dataclass(frozen=True)
class StageTransition:
    from_stage: Stage
    to_stage: Stage
    guard: Guard
    label: str


def _always(_record: HandoffRecord | None) -> bool:
    return True


def _has_plan(record: HandoffRecord | None) -> bool:
    return record is not None and record.plan is not None


def _has_implementation(record: HandoffRecord | None) -> bool:
    return record is not None and record.implementation is not None


def _has_verification(record: HandoffRecord | None) -> bool:
    return record is not None and record.verification is not None


def _verification_failed(record: HandoffRecord | None) -> bool:
    return (
        record is not None
        and record.verification is not None
        and not record.verification.tests_passed
    )


def _code_review_is(approved: bool) -> Guard:
    def guard(record: HandoffRecord | None) -> bool:
        return (
            record is not None
            and record.code_review is not None
            and record.code_review.approved is approved
        )

    return guard


def _test_review_is(approved: bool) -> Guard:
    def guard(record: HandoffRecord | None) -> bool:
        return (
            record is not None
            and record.test_review is not None
            and record.test_review.approved is approved
        )

    return guard


def _final_review_is(approved: bool) -> Guard:
    def guard(record: HandoffRecord | None) -> bool:
        return (
            record is not None
            and record.final_review is not None
            and record.final_review.approved is approved
        )

    return guard


def _audit_passed(record: HandoffRecord | None) -> bool:
    return record is not None and record.audit is not None and not record.audit.failed


def _audit_failed(record: HandoffRecord | None) -> bool:
    return record is not None and record.audit is not None and record.audit.failed


TRANSITIONS: tuple[StageTransition, ...] = (
    # ===== PLANNING =====
    StageTransition(Stage.IDLE, Stage.PLANNING, _always, "Run started"),
    StageTransition(
        Stage.PLANNING, Stage.IMPLEMENTING, _has_plan, "Plan ready, hand off to implementer"
    ),
    # ===== IMPLEMENTATION & CODE REVIEW =====
    StageTransition(
        Stage.IMPLEMENTING,
        Stage.REVIEW_CODE,
        _has_implementation,
        "Code committed, planner reviews",
    ),
    StageTransition(
        Stage.REVIEW_CODE, Stage.VERIFYING, _code_review_is(True), "Code approved"
    ),
    StageTransition(
        Stage.REVIEW_CODE,
        Stage.IMPLEMENTING,
        _code_review_is(False),
        "Code rejected, return to implementer",
    ),
    # ===== VERIFICATION & TEST REVIEW =====
    StageTransition(
        Stage.VERIFYING,
        Stage.REVIEW_TESTS,
        _has_verification,
        "Verification done, planner reviews",
    ),
    StageTransition(
        Stage.VERIFYING,
        Stage.IMPLEMENTING,
        _verification_failed,
        "Tests failed, return to implementer",
    ),
    StageTransition(
        Stage.REVIEW_TESTS, Stage.AUDITING, _test_review_is(True), "Tests approved"
    ),
    StageTransition(
        Stage.REVIEW_TESTS,
        Stage.IMPLEMENTING,
        _test_review_is(False),
        "Tests rejected, return to implementer",
    ),
    # ===== AUDIT & FINAL REVIEW =====
    StageTransition(
        Stage.AUDITING, Stage.REVIEW_FINAL, _audit_passed, "Audit done, final review"
    ),
    StageTransition(
        Stage.AUDITING, Stage.PLANNING, _audit_failed, "Audit failed, re-plan fixes"
    ),
    StageTransition(
        Stage.REVIEW_FINAL, Stage.COMPLETED, _final_review_is(True), "Run complete"
    ),
    StageTransition(
        Stage.REVIEW_FINAL,
        Stage.IMPLEMENTING,
        _final_review_is(False),
        "Final review failed, return to implementer",
    ),
)


def find_transition(from_stage: Stage, to_stage: Stage) -> StageTransition | None:
    for transition in TRANSITIONS:
        if transition.from_stage == from_stage and transition.to_stage == to_stage:
            return transition
    return None


def check_transition(
    from_stage: Stage, to_stage: Stage, record: HandoffRecord | None
) -> str:
    """Return the label of the allowed move.

    Raises:
        InvalidTransition: If leaving a terminal stage, the pair is not
            tabled, or its guard rejects ``record``
    """
    if from_stage in TERMINAL_STAGES:
        raise InvalidTransition(from_stage, to_stage, "reset() required")

    transition = find_transition(from_stage, to_stage)
    if transition is None:
        if to_stage == Stage.PLANNING:
            return "Return to planning"
        raise InvalidTransition(from_stage, to_stage)

    if not transition.guard(record):
        if to_stage == Stage.PLANNING:
            return "Return to planning"
        raise InvalidTransition(
            from_stage, to_stage, f"guard not satisfied ({transition.label})"
        )
    return transition.label


def next_stage(stage: Stage, output: StageOutput) -> Stage | None:
    """Where the pipeline goes after ``stage`` reports ``output``.

    Supervisor reviews approve unless they explicitly reject. Returns None
    for terminal stages.
    """
    if stage == Stage.IDLE:
        return Stage.PLANNING
    if stage == Stage.PLANNING:
        return Stage.IMPLEMENTING
    if stage == Stage.IMPLEMENTING:
        return Stage.REVIEW_CODE
    if stage == Stage.REVIEW_CODE:
        if output.code_review is not None and not output.code_review.approved:
            return Stage.IMPLEMENTING
        return Stage.VERIFYING
    if stage == Stage.VERIFYING:
        if output.verification is not None and not output.verification.tests_passed:
            return Stage.IMPLEMENTING
        return Stage.REVIEW_TESTS
    if stage == Stage.REVIEW_TESTS:
        if output.test_review is not None and not output.test_review.approved:
            return Stage.IMPLEMENTING
        return Stage.AUDITING
    if stage == Stage.AUDITING:
        if output.audit is not None and output.audit.failed:
            return Stage.PLANNING
        return Stage.REVIEW_FINAL
    if stage == Stage.REVIEW_FINAL:
        if output.final_review is not None and not output.final_review.approved:
            return Stage.IMPLEMENTING
        return Stage.COMPLETED
    # COMPLETED, BLOCKED
    return None
