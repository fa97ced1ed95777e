"""Shared pytest fixtures for sentinelflow tests."""

from datetime import datetime, timezone

import pytest

from sentinelflow.domain.interfaces import (
    HumanInterventionInterface,
    SummaryWriterInterface,
    UINotifierInterface,
)
from sentinelflow.domain.models import (
    AuditRecommendation,
    AuditResult,
    CodeReview,
    FailureRecord,
    FinalReview,
    HandoffRecord,
    ImplementationContext,
    Plan,
    PlanTask,
    RecordStatus,
    StageStatus,
    TechStack,
    TestCredentials,
    TestResult,
    TestReview,
    TestScenario,
    VerificationResult,
    Vulnerability,
)
from sentinelflow.domain.stages import Stage
from sentinelflow.infrastructure.human import ScriptedHumanIntervention
from sentinelflow.infrastructure.persistence.event_log import InMemoryEventLog
from sentinelflow.infrastructure.workers import MockWorkerSwitcher

# =============================================================================
# PAYLOADS
# =============================================================================


@pytest.fixture
def sample_plan() -> Plan:
    """A two-task plan for a small web app."""
    return Plan(
        project_name="todo-app",
        summary="Single page todo list with login",
        tasks=(
            PlanTask(id=1, title="Login form", acceptance_criteria=("redirects home",)),
            PlanTask(id=2, title="Todo list", dependencies=(1,)),
        ),
        tech_stack=TechStack(frontend=("react",), backend=("fastapi",), database="sqlite"),
        acceptance_criteria=("user can add a todo",),
    )


@pytest.fixture
def sample_implementation() -> ImplementationContext:
    return ImplementationContext(
        target_url="http://localhost:3000",
        test_credentials=TestCredentials(user="demo", password="demo"),
        test_scenarios=(
            TestScenario(name="login", steps=("open /login", "submit form")),
        ),
        changed_files=("src/App.tsx", "api/main.py"),
        run_command="npm run dev",
    )


@pytest.fixture
def passing_verification() -> VerificationResult:
    return VerificationResult(
        tests_passed=True,
        test_results=(TestResult(scenario="login", passed=True),),
    )


@pytest.fixture
def failing_verification() -> VerificationResult:
    return VerificationResult(
        tests_passed=False,
        test_results=(TestResult(scenario="login", passed=False),),
    )


@pytest.fixture
def passing_audit() -> AuditResult:
    return AuditResult(security_passed=True)


@pytest.fixture
def failing_audit() -> AuditResult:
    return AuditResult(
        security_passed=False,
        vulnerabilities=(
            Vulnerability(
                severity="high",
                kind="SQLi",
                file="api/main.py",
                line=42,
                description="Unparameterized query",
            ),
        ),
        recommendation=AuditRecommendation.FIX_REQUIRED,
    )


@pytest.fixture
def full_record(
    sample_plan: Plan,
    sample_implementation: ImplementationContext,
    passing_verification: VerificationResult,
    passing_audit: AuditResult,
) -> HandoffRecord:
    """A record carrying every payload, as seen at the end of a run."""
    return HandoffRecord(
        record_id="hctx-test-001",
        created_at=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
        from_stage=Stage.REVIEW_FINAL,
        to_stage=Stage.COMPLETED,
        attempt_number=8,
        plan=sample_plan,
        implementation=sample_implementation,
        verification=passing_verification,
        audit=passing_audit,
        code_review=CodeReview(approved=True),
        test_review=TestReview(approved=True),
        final_review=FinalReview(approved=True, feedback="Ship it"),
        previous_agent_notes="All green",
        failure_history=[
            FailureRecord(
                stage=Stage.VERIFYING,
                timestamp=datetime(2025, 1, 1, 11, 0, tzinfo=timezone.utc),
                reason="Login test failed",
            )
        ],
        status=RecordStatus.COMPLETED,
    )


# =============================================================================
# COLLABORATOR DOUBLES
# =============================================================================


class RecordingNotifier(UINotifierInterface):
    def __init__(self) -> None:
        self.statuses: list[StageStatus] = []

    def notify(self, status: StageStatus) -> None:
        self.statuses.append(status)


class RecordingSummaryWriter(SummaryWriterInterface):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.records: list[HandoffRecord] = []

    async def write(self, record: HandoffRecord) -> str:
        if self.fail:
            raise OSError("disk full")
        self.records.append(record)
        return "memory://summary"


class RaisingHuman(HumanInterventionInterface):
    async def ask(self, reason: str, record: HandoffRecord) -> bool:
        raise RuntimeError("prompt closed")


@pytest.fixture
def worker_switcher() -> MockWorkerSwitcher:
    return MockWorkerSwitcher()


@pytest.fixture
def event_log() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def summary_writer() -> RecordingSummaryWriter:
    return RecordingSummaryWriter()


@pytest.fixture
def halting_human() -> ScriptedHumanIntervention:
    """Always answers 'halt'."""
    return ScriptedHumanIntervention(default=False)


@pytest.fixture
def resuming_human() -> ScriptedHumanIntervention:
    """Always answers 'resume'."""
    return ScriptedHumanIntervention(default=True)


@pytest.fixture
def raising_human() -> RaisingHuman:
    return RaisingHuman()


@pytest.fixture
def failing_summary_writer() -> RecordingSummaryWriter:
    return RecordingSummaryWriter(fail=True)
