"""
Markdown walkthrough writer.

Renders the completed handoff record as ``walkthrough.md`` in a workspace
directory. Screenshots left in the workspace by the verifier are linked.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from sentinelflow.domain.interfaces import SummaryWriterInterface
from sentinelflow.domain.models import HandoffRecord
from sentinelflow.domain.serialization import format_timestamp
from sentinelflow.domain.stages import Stage, display_name

logger = logging.getLogger(__name__)

SCREENSHOT_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp")
SCREENSHOT_MARKERS = ("screenshot", "test", "browser")

_PLANNED_FLOW = (
    Stage.PLANNING,
    Stage.IMPLEMENTING,
    Stage.REVIEW_CODE,
    Stage.VERIFYING,
    Stage.REVIEW_TESTS,
    Stage.AUDITING,
    Stage.REVIEW_FINAL,
)


def render_walkthrough(
    record: HandoffRecord,
    screenshots: list[str] | None = None,
    completed_at: datetime | None = None,
) -> str:
    """Render the walkthrough document for a completed record."""
    lines = [
        "# Workflow Walkthrough",
        "",
        f"**Status:** {record.status.value}",
        f"**Record:** {record.record_id} (attempt #{record.attempt_number})",
    ]
    if completed_at is not None:
        lines.append(f"**Completed at:** {format_timestamp(completed_at)}")
    lines += ["", "---", "", "## Workflow Flow", "", "```mermaid", "flowchart LR"]
    for i in range(len(_PLANNED_FLOW) - 1):
        lines.append(
            f'    S{i}["{display_name(_PLANNED_FLOW[i])}"] --> '
            f'S{i + 1}["{display_name(_PLANNED_FLOW[i + 1])}"]'
        )
    lines += ["```", ""]

    if record.failure_history:
        lines.append(f"## Retries ({len(record.failure_history)})")
        lines.append("")
        for failure in record.failure_history:
            lines.append(f"- [{failure.stage.value}] {failure.reason}")
        lines.append("")

    if record.plan:
        plan = record.plan
        lines += [
            "## Plan",
            "",
            f"**Project:** {plan.project_name or 'N/A'}",
            f"**Summary:** {plan.summary or 'N/A'}",
            "",
        ]
        if plan.tasks:
            lines.append("**Tasks:**")
            lines += [f"- {task.title}" for task in plan.tasks]
            lines.append("")

    if record.implementation:
        impl = record.implementation
        lines += [
            "## Implementation",
            "",
            f"**Test URL:** {impl.target_url or 'N/A'}",
            f"**Run Command:** {impl.run_command or 'N/A'}",
            "",
        ]
        if impl.changed_files:
            lines.append("**Changed Files:**")
            lines += [f"- `{path}`" for path in impl.changed_files]
            lines.append("")

    if record.verification:
        verification = record.verification
        verdict = "PASSED" if verification.tests_passed else "FAILED"
        lines += ["## Test Results", "", f"**Test Result:** {verdict}", ""]
        if verification.test_results:
            for result in verification.test_results:
                mark = "x" if result.passed else " "
                lines.append(f"- [{mark}] {result.scenario}")
            lines.append("")

    if record.audit:
        audit = record.audit
        verdict = "APPROVED" if audit.security_passed else "ISSUES FOUND"
        lines += [
            "## Security Audit",
            "",
            f"**Security Result:** {verdict}",
            f"**Recommendation:** {audit.recommendation.value}",
        ]
        if audit.vulnerabilities:
            lines.append("**Vulnerabilities Found:**")
            lines += [
                f"- [{v.severity}] {v.description}" for v in audit.vulnerabilities
            ]
        lines.append("")

    if record.final_review:
        verdict = "APPROVED" if record.final_review.approved else "REJECTED"
        lines += ["## Final Review", "", f"**Verdict:** {verdict}"]
        if record.final_review.feedback:
            lines.append(record.final_review.feedback)
        lines.append("")

    if screenshots:
        lines += ["## Test Screenshots", ""]
        for i, name in enumerate(screenshots, start=1):
            lines += [f"### Screenshot {i}", f"![{name}](./{name})", ""]

    lines += ["---", "", "*Generated by SentinelFlow*", ""]
    return "\n".join(lines)


def find_screenshots(workspace: Path) -> list[str]:
    """Image files in ``workspace`` whose names look like test captures."""
    if not workspace.is_dir():
        return []
    return sorted(
        p.name
        for p in workspace.iterdir()
        if p.is_file()
        and p.suffix.lower() in SCREENSHOT_SUFFIXES
        and any(marker in p.name.lower() for marker in SCREENSHOT_MARKERS)
    )


class MarkdownWalkthroughWriter(SummaryWriterInterface):
    """Writes ``walkthrough.md`` into a workspace directory."""

    def __init__(self, workspace: str | Path, filename: str = "walkthrough.md"):
        self._workspace = Path(workspace)
        self._filename = filename

    @property
    def path(self) -> Path:
        return self._workspace / self._filename

    async def write(self, record: HandoffRecord) -> str:
        return await asyncio.to_thread(self._write_sync, record)

    def _write_sync(self, record: HandoffRecord) -> str:
        self._workspace.mkdir(parents=True, exist_ok=True)
        content = render_walkthrough(
            record,
            screenshots=find_screenshots(self._workspace),
            completed_at=record.created_at,
        )
        temp_path = self.path.with_suffix(".tmp")
        temp_path.write_text(content, encoding="utf-8")
        temp_path.replace(self.path)
        logger.debug("Wrote walkthrough for %s to %s", record.record_id, self.path)
        return str(self.path)
