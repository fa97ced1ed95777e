"""
Human-readable digests of a handoff record.

``summarize`` is injected into worker prompts; ``summarize_for_ui`` is the
one-liner shown next to the current stage. Both are deterministic and skip
whatever sections the record does not have yet.
"""

import json
from dataclasses import asdict

from sentinelflow.domain.models import HandoffRecord


def summarize(record: HandoffRecord) -> str:
    lines: list[str] = [
        f"## Handoff Context (Attempt #{record.attempt_number})",
        f"From: {record.from_stage.value}",
        f"To: {record.to_stage.value}",
        "",
    ]

    if record.previous_agent_notes:
        lines += ["### Previous Agent Notes", record.previous_agent_notes, ""]

    if record.failure_history:
        lines.append(f"### Previous Failures ({len(record.failure_history)})")
        for failure in record.failure_history:
            lines.append(f"- [{failure.stage.value}] {failure.reason}")
        lines.append("")

    if record.plan is not None:
        plan = record.plan
        lines += [
            "### Plan",
            f"Project: {plan.project_name}",
            f"Tasks: {len(plan.tasks)}",
            f"Tech Stack: {json.dumps(asdict(plan.tech_stack), sort_keys=True)}",
            f"Risks: {len(plan.risks)}",
            "",
        ]

    if record.implementation is not None:
        impl = record.implementation
        lines += [
            "### Implementation",
            f"Target URL: {impl.target_url}",
            f"Changed Files: {len(impl.changed_files)}",
            f"Test Scenarios: {len(impl.test_scenarios)}",
            "",
        ]

    if record.verification is not None:
        verification = record.verification
        lines += [
            "### Verification",
            f"Tests Passed: {verification.tests_passed}",
            f"Sensitive Operations: {len(verification.sensitive_operations)}",
            "",
        ]

    if record.audit is not None:
        audit = record.audit
        lines += [
            "### Security Audit",
            f"Security Passed: {audit.security_passed}",
            f"Vulnerabilities: {len(audit.vulnerabilities)}",
            f"Recommendation: {audit.recommendation.value}",
            "",
        ]

    for title, review in (
        ("Code Review", record.code_review),
        ("Test Review", record.test_review),
        ("Final Review", record.final_review),
    ):
        if review is not None:
            verdict = "approved" if review.approved else "rejected"
            lines += [f"### {title}", f"Verdict: {verdict}", ""]

    if record.next_phase_instructions:
        lines += ["### Phase Instructions", record.next_phase_instructions, ""]

    return "\n".join(lines)


def summarize_for_ui(record: HandoffRecord | None) -> str:
    if record is None:
        return ""
    parts: list[str] = []
    if record.plan is not None and record.plan.project_name:
        parts.append(f"Plan: {record.plan.project_name}")
    if record.implementation is not None:
        parts.append(f"Files: {len(record.implementation.changed_files)} changed")
    if record.verification is not None:
        passed = "PASSED" if record.verification.tests_passed else "FAILED"
        parts.append(f"Tests: {passed}")
    if record.audit is not None:
        parts.append(f"Security: {'OK' if record.audit.security_passed else 'Issues'}")
    return " | ".join(parts)
