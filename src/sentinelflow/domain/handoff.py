"""
Handoff record creation and derivation.

A run has one current record. The first one is created when the pipeline
leaves IDLE; every completed stage derives a successor carrying the
accumulated payloads forward with ``attempt_number`` bumped by one.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from sentinelflow.domain.models import (
    PAYLOAD_FIELDS,
    FailureRecord,
    HandoffRecord,
    RecordStatus,
    StageOutput,
)
from sentinelflow.domain.stages import Stage


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    return f"hctx-{uuid.uuid4().hex}"


def create_handoff_record(
    from_stage: Stage,
    to_stage: Stage,
    previous: HandoffRecord | None = None,
) -> HandoffRecord:
    """Build a fresh record.

    Only ``failure_history`` and the attempt counter are inherited from
    ``previous``; payloads are not. Never fails.
    """
    return HandoffRecord(
        record_id=new_record_id(),
        created_at=utc_now(),
        from_stage=from_stage,
        to_stage=to_stage,
        attempt_number=previous.attempt_number + 1 if previous else 1,
        failure_history=list(previous.failure_history) if previous else [],
        status=RecordStatus.PENDING,
    )


def merge_output(record: HandoffRecord, output: StageOutput) -> HandoffRecord:
    """Shallow-merge stage output onto a copy of ``record``.

    Fields left as None in ``output`` keep the record's value.
    """
    changes: dict[str, object] = {
        name: getattr(output, name)
        for name in PAYLOAD_FIELDS
        if getattr(output, name) is not None
    }
    if output.previous_agent_notes is not None:
        changes["previous_agent_notes"] = output.previous_agent_notes
    if output.next_phase_instructions is not None:
        changes["next_phase_instructions"] = output.next_phase_instructions
    return replace(
        record,
        failure_history=list(record.failure_history),
        status=RecordStatus.COMPLETED,
        **changes,
    )


def derive_handoff_record(
    previous: HandoffRecord,
    output: StageOutput,
    from_stage: Stage,
    to_stage: Stage,
) -> HandoffRecord:
    """Successor of ``previous`` with ``output`` merged in."""
    fresh = create_handoff_record(from_stage, to_stage, previous)
    carried = replace(
        previous,
        record_id=fresh.record_id,
        created_at=fresh.created_at,
        from_stage=from_stage,
        to_stage=to_stage,
        attempt_number=fresh.attempt_number,
        failure_history=fresh.failure_history,
    )
    return merge_output(carried, output)


def retarget(
    record: HandoffRecord,
    from_stage: Stage,
    to_stage: Stage,
    status: RecordStatus = RecordStatus.IN_PROGRESS,
) -> HandoffRecord:
    """Copy of ``record`` pointing at a new transition."""
    return replace(
        record,
        from_stage=from_stage,
        to_stage=to_stage,
        status=status,
        failure_history=list(record.failure_history),
    )


def with_failure(record: HandoffRecord, failure: FailureRecord) -> HandoffRecord:
    """Copy of ``record`` with ``failure`` appended and status blocked."""
    return replace(
        record,
        failure_history=[*record.failure_history, failure],
        status=RecordStatus.BLOCKED,
    )


def copy_record(record: HandoffRecord) -> HandoffRecord:
    """Copy of ``record`` with its own failure history list."""
    return replace(record, failure_history=list(record.failure_history))
