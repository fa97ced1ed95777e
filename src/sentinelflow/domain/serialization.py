"""
Wire format for handoff records.

A record serializes to a JSON object with snake_case keys. Timestamps are
ISO-8601 strings normalized to UTC, so a round trip restores the same
instant regardless of the local zone.
"""

import json
from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sentinelflow.domain.exceptions import HandoffDecodeError
from sentinelflow.domain.models import (
    AuditRecommendation,
    AuditResult,
    CodeReview,
    DastResult,
    FailureDetails,
    FailureRecord,
    FinalReview,
    HandoffRecord,
    IdentifiedRisk,
    ImplementationContext,
    Plan,
    PlanTask,
    RecordStatus,
    ReviewIssue,
    SensitiveOperation,
    StageOutput,
    TechStack,
    TestCredentials,
    TestResult,
    TestReview,
    TestScenario,
    VerificationResult,
    VisualCheckpoint,
    Vulnerability,
)
from sentinelflow.domain.stages import Stage

# =============================================================================
# TIMESTAMPS
# =============================================================================


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC. Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# =============================================================================
# ENCODING
# =============================================================================


def _plain(value: Any) -> Any:
    """Convert models to JSON-compatible values (lists, not tuples)."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def record_to_dict(record: HandoffRecord) -> dict[str, Any]:
    """Serialize a record to a JSON-compatible dict."""
    result: dict[str, Any] = _plain(record)
    return result


def serialize(record: HandoffRecord) -> bytes:
    return json.dumps(record_to_dict(record), sort_keys=True).encode("utf-8")


# =============================================================================
# DECODING
# =============================================================================


def _tuple(data: dict[str, Any], key: str) -> tuple[Any, ...]:
    return tuple(data.get(key) or ())


def _plan_from_dict(data: dict[str, Any]) -> Plan:
    stack = data.get("tech_stack") or {}
    return Plan(
        project_name=data["project_name"],
        summary=data.get("summary", ""),
        tasks=tuple(
            PlanTask(
                id=t["id"],
                title=t["title"],
                description=t.get("description", ""),
                dependencies=_tuple(t, "dependencies"),
                estimated_complexity=t.get("estimated_complexity", "medium"),
                acceptance_criteria=_tuple(t, "acceptance_criteria"),
            )
            for t in data.get("tasks") or ()
        ),
        tech_stack=TechStack(
            frontend=_tuple(stack, "frontend"),
            backend=_tuple(stack, "backend"),
            database=stack.get("database"),
            testing=_tuple(stack, "testing"),
            other=_tuple(stack, "other"),
        ),
        acceptance_criteria=_tuple(data, "acceptance_criteria"),
        risks=tuple(
            IdentifiedRisk(
                description=r["description"],
                mitigation=r.get("mitigation", ""),
                severity=r.get("severity", "medium"),
            )
            for r in data.get("risks") or ()
        ),
    )


def _implementation_from_dict(data: dict[str, Any]) -> ImplementationContext:
    creds = data.get("test_credentials")
    return ImplementationContext(
        target_url=data["target_url"],
        test_credentials=(
            TestCredentials(user=creds["user"], password=creds["password"])
            if creds
            else None
        ),
        test_scenarios=tuple(
            TestScenario(
                name=s["name"],
                steps=_tuple(s, "steps"),
                expected_result=s.get("expected_result", ""),
                priority=s.get("priority", "normal"),
            )
            for s in data.get("test_scenarios") or ()
        ),
        visual_checkpoints=tuple(
            VisualCheckpoint(
                selector=c["selector"],
                expected_state=c.get("expected_state", ""),
                screenshot_required=c.get("screenshot_required", False),
            )
            for c in data.get("visual_checkpoints") or ()
        ),
        changed_files=_tuple(data, "changed_files"),
        run_command=data.get("run_command", ""),
        setup_instructions=_tuple(data, "setup_instructions"),
    )


def _test_result_from_dict(data: dict[str, Any]) -> TestResult:
    details = data.get("failure_details")
    return TestResult(
        scenario=data["scenario"],
        passed=data["passed"],
        screenshots=_tuple(data, "screenshots"),
        notes=data.get("notes"),
        failure_details=(
            FailureDetails(
                step=details["step"],
                error=details["error"],
                suggested_fix=details.get("suggested_fix"),
            )
            if details
            else None
        ),
    )


def _verification_from_dict(data: dict[str, Any]) -> VerificationResult:
    return VerificationResult(
        tests_passed=data["tests_passed"],
        test_results=tuple(
            _test_result_from_dict(r) for r in data.get("test_results") or ()
        ),
        changed_files=_tuple(data, "changed_files"),
        entry_points=_tuple(data, "entry_points"),
        sensitive_operations=tuple(
            SensitiveOperation(
                file=op["file"],
                line=op["line"],
                kind=op["kind"],
                description=op.get("description", ""),
            )
            for op in data.get("sensitive_operations") or ()
        ),
    )


def _audit_from_dict(data: dict[str, Any]) -> AuditResult:
    return AuditResult(
        security_passed=data["security_passed"],
        vulnerabilities=tuple(
            Vulnerability(
                severity=v["severity"],
                kind=v["kind"],
                file=v["file"],
                line=v["line"],
                description=v["description"],
                recommendation=v.get("recommendation", ""),
                cwe_id=v.get("cwe_id"),
                evidence=v.get("evidence"),
            )
            for v in data.get("vulnerabilities") or ()
        ),
        dast_results=tuple(
            DastResult(
                attack=d["attack"],
                target=d["target"],
                result=d["result"],
                payload=d.get("payload", ""),
                evidence=d.get("evidence"),
            )
            for d in data.get("dast_results") or ()
        ),
        recommendation=AuditRecommendation(data.get("recommendation", "approve")),
        summary=data.get("summary", ""),
    )


def _code_review_from_dict(data: dict[str, Any]) -> CodeReview:
    return CodeReview(
        approved=data["approved"],
        feedback=data.get("feedback", ""),
        issues=tuple(
            ReviewIssue(
                file=i["file"],
                issue=i["issue"],
                line=i.get("line"),
                severity=i.get("severity", "minor"),
            )
            for i in data.get("issues") or ()
        ),
        meets_architecture=data.get("meets_architecture", True),
        meets_acceptance_criteria=data.get("meets_acceptance_criteria", True),
    )


def _test_review_from_dict(data: dict[str, Any]) -> TestReview:
    return TestReview(
        approved=data["approved"],
        feedback=data.get("feedback", ""),
        coverage_adequate=data.get("coverage_adequate", True),
        tests_match_requirements=data.get("tests_match_requirements", True),
        missing_tests=_tuple(data, "missing_tests"),
    )


def _final_review_from_dict(data: dict[str, Any]) -> FinalReview:
    return FinalReview(
        approved=data["approved"],
        feedback=data.get("feedback", ""),
        security_acceptable=data.get("security_acceptable", True),
        ready_for_deployment=data.get("ready_for_deployment", True),
        remaining_issues=_tuple(data, "remaining_issues"),
    )


_PAYLOAD_DECODERS = {
    "plan": _plan_from_dict,
    "implementation": _implementation_from_dict,
    "verification": _verification_from_dict,
    "audit": _audit_from_dict,
    "code_review": _code_review_from_dict,
    "test_review": _test_review_from_dict,
    "final_review": _final_review_from_dict,
}


def _payloads_from_dict(data: dict[str, Any]) -> dict[str, Any]:
    return {
        name: decode(data[name])
        for name, decode in _PAYLOAD_DECODERS.items()
        if data.get(name) is not None
    }


def record_from_dict(data: dict[str, Any]) -> HandoffRecord:
    """Deserialize a dict produced by record_to_dict.

    Raises:
        HandoffDecodeError: If required keys are missing or malformed
    """
    try:
        return HandoffRecord(
            record_id=data["record_id"],
            created_at=parse_timestamp(data["created_at"]),
            from_stage=Stage(data["from_stage"]),
            to_stage=Stage(data["to_stage"]),
            attempt_number=data["attempt_number"],
            previous_agent_notes=data.get("previous_agent_notes", ""),
            failure_history=[
                FailureRecord(
                    stage=Stage(f["stage"]),
                    timestamp=parse_timestamp(f["timestamp"]),
                    reason=f["reason"],
                    details=f.get("details", ""),
                )
                for f in data.get("failure_history") or ()
            ],
            next_phase_instructions=data.get("next_phase_instructions"),
            status=RecordStatus(data.get("status", "pending")),
            **_payloads_from_dict(data),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise HandoffDecodeError(f"Malformed handoff record: {e!r}") from e


def deserialize(raw: bytes | str) -> HandoffRecord:
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise HandoffDecodeError(f"Handoff record is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise HandoffDecodeError("Handoff record must be a JSON object")
    return record_from_dict(data)


def stage_output_from_dict(data: dict[str, Any]) -> StageOutput:
    """Build a StageOutput from a worker's structured (wire-shaped) output.

    Raises:
        HandoffDecodeError: If a payload present in ``data`` is malformed
    """
    try:
        return StageOutput(
            previous_agent_notes=data.get("previous_agent_notes"),
            next_phase_instructions=data.get("next_phase_instructions"),
            **_payloads_from_dict(data),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise HandoffDecodeError(f"Malformed stage output: {e!r}") from e
