"""
Domain models for the handoff pipeline.

Stage payloads are immutable (frozen dataclasses). The HandoffRecord itself
is a plain dataclass: the engine derives a new record per completed stage and
only ever appends to ``failure_history``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from sentinelflow.domain.stages import Stage

# =============================================================================
# ENUMERATIONS
# =============================================================================


class RecordStatus(str, Enum):
    """Lifecycle status of a handoff record."""

    PENDING = "pending"  # Created, stage not started
    IN_PROGRESS = "in_progress"  # Target stage is working on it
    COMPLETED = "completed"  # Stage reported its output
    FAILED = "failed"
    BLOCKED = "blocked"  # Escalated, waiting for a human decision


class AuditRecommendation(str, Enum):
    """Ternary verdict of the security audit."""

    APPROVE = "approve"
    FIX_REQUIRED = "fix_required"
    REJECT = "reject"


# =============================================================================
# PLANNING PAYLOAD
# =============================================================================


@dataclass(frozen=True)
class PlanTask:
    """Single task in the plan."""

    id: int
    title: str
    description: str = ""
    dependencies: tuple[int, ...] = ()  # ids of tasks that must finish first
    estimated_complexity: str = "medium"  # low | medium | high
    acceptance_criteria: tuple[str, ...] = ()


@dataclass(frozen=True)
class IdentifiedRisk:
    description: str
    mitigation: str = ""
    severity: str = "medium"  # low | medium | high


@dataclass(frozen=True)
class TechStack:
    frontend: tuple[str, ...] = ()
    backend: tuple[str, ...] = ()
    database: str | None = None
    testing: tuple[str, ...] = ()
    other: tuple[str, ...] = ()


@dataclass(frozen=True)
class Plan:
    """Planner output consumed by the implementer."""

    project_name: str
    summary: str = ""
    tasks: tuple[PlanTask, ...] = ()
    tech_stack: TechStack = field(default_factory=TechStack)
    acceptance_criteria: tuple[str, ...] = ()
    risks: tuple[IdentifiedRisk, ...] = ()


# =============================================================================
# IMPLEMENTATION PAYLOAD
# =============================================================================


@dataclass(frozen=True)
class TestCredentials:
    __test__ = False  # not a pytest test class

    user: str
    password: str


@dataclass(frozen=True)
class TestScenario:
    __test__ = False  # not a pytest test class

    name: str
    steps: tuple[str, ...] = ()
    expected_result: str = ""
    priority: str = "normal"  # critical | high | normal


@dataclass(frozen=True)
class VisualCheckpoint:
    selector: str
    expected_state: str = ""
    screenshot_required: bool = False


@dataclass(frozen=True)
class ImplementationContext:
    """Implementer output consumed by the verifier."""

    target_url: str
    test_credentials: TestCredentials | None = None
    test_scenarios: tuple[TestScenario, ...] = ()
    visual_checkpoints: tuple[VisualCheckpoint, ...] = ()
    changed_files: tuple[str, ...] = ()
    run_command: str = ""
    setup_instructions: tuple[str, ...] = ()


# =============================================================================
# VERIFICATION PAYLOAD
# =============================================================================


@dataclass(frozen=True)
class FailureDetails:
    step: str
    error: str
    suggested_fix: str | None = None


@dataclass(frozen=True)
class TestResult:
    __test__ = False  # not a pytest test class

    scenario: str
    passed: bool
    screenshots: tuple[str, ...] = ()
    notes: str | None = None
    failure_details: FailureDetails | None = None


@dataclass(frozen=True)
class SensitiveOperation:
    file: str
    line: int
    kind: str  # database | auth | file | network | crypto
    description: str = ""


@dataclass(frozen=True)
class VerificationResult:
    """Verifier output consumed by the auditor."""

    tests_passed: bool
    test_results: tuple[TestResult, ...] = ()
    changed_files: tuple[str, ...] = ()
    entry_points: tuple[str, ...] = ()
    sensitive_operations: tuple[SensitiveOperation, ...] = ()


# =============================================================================
# AUDIT PAYLOAD
# =============================================================================


@dataclass(frozen=True)
class Vulnerability:
    severity: str  # critical | high | medium | low | info
    kind: str  # SQLi | XSS | Auth | IDOR | Injection | Crypto | Config | Other
    file: str
    line: int
    description: str
    recommendation: str = ""
    cwe_id: str | None = None
    evidence: str | None = None


@dataclass(frozen=True)
class DastResult:
    attack: str
    target: str
    result: str  # blocked | vulnerable | error
    payload: str = ""
    evidence: str | None = None


@dataclass(frozen=True)
class AuditResult:
    """Security auditor output."""

    security_passed: bool
    vulnerabilities: tuple[Vulnerability, ...] = ()
    dast_results: tuple[DastResult, ...] = ()
    recommendation: AuditRecommendation = AuditRecommendation.APPROVE
    summary: str = ""

    @property
    def failed(self) -> bool:
        return (
            not self.security_passed
            or self.recommendation == AuditRecommendation.REJECT
        )


# =============================================================================
# SUPERVISOR REVIEWS
# =============================================================================


@dataclass(frozen=True)
class ReviewIssue:
    file: str
    issue: str
    line: int | None = None
    severity: str = "minor"  # critical | major | minor | suggestion


@dataclass(frozen=True)
class CodeReview:
    approved: bool
    feedback: str = ""
    issues: tuple[ReviewIssue, ...] = ()
    meets_architecture: bool = True
    meets_acceptance_criteria: bool = True


@dataclass(frozen=True)
class TestReview:
    __test__ = False  # not a pytest test class

    approved: bool
    feedback: str = ""
    coverage_adequate: bool = True
    tests_match_requirements: bool = True
    missing_tests: tuple[str, ...] = ()


@dataclass(frozen=True)
class FinalReview:
    approved: bool
    feedback: str = ""
    security_acceptable: bool = True
    ready_for_deployment: bool = True
    remaining_issues: tuple[str, ...] = ()


# =============================================================================
# HANDOFF RECORD
# =============================================================================


@dataclass(frozen=True)
class FailureRecord:
    """Entry in a record's append-only failure history."""

    stage: Stage
    timestamp: datetime
    reason: str
    details: str = ""


PAYLOAD_FIELDS: tuple[str, ...] = (
    "plan",
    "implementation",
    "verification",
    "audit",
    "code_review",
    "test_review",
    "final_review",
)


@dataclass
class HandoffRecord:
    """State carried between stages, accumulating history over a run."""

    # Identity
    record_id: str
    created_at: datetime
    from_stage: Stage
    to_stage: Stage
    attempt_number: int  # +1 per derivation, across the whole run

    # Stage payloads, at most one of each
    plan: Plan | None = None
    implementation: ImplementationContext | None = None
    verification: VerificationResult | None = None
    audit: AuditResult | None = None
    code_review: CodeReview | None = None
    test_review: TestReview | None = None
    final_review: FinalReview | None = None

    previous_agent_notes: str = ""
    failure_history: list[FailureRecord] = field(default_factory=list)
    next_phase_instructions: str | None = None
    status: RecordStatus = RecordStatus.PENDING


@dataclass(frozen=True)
class StageOutput:
    """What a stage reports on completion: a partial HandoffRecord.

    ``None`` fields leave the corresponding record field untouched.
    """

    plan: Plan | None = None
    implementation: ImplementationContext | None = None
    verification: VerificationResult | None = None
    audit: AuditResult | None = None
    code_review: CodeReview | None = None
    test_review: TestReview | None = None
    final_review: FinalReview | None = None
    previous_agent_notes: str | None = None
    next_phase_instructions: str | None = None


# =============================================================================
# VALIDATION AND RESULTS
# =============================================================================


@dataclass(frozen=True)
class ValidationError:
    """A record is missing something the target stage needs."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of every public engine operation that moves the pipeline."""

    success: bool
    from_stage: Stage
    to_stage: Stage
    record: HandoffRecord | None = None
    error: str | None = None
    validation_errors: tuple[ValidationError, ...] = ()


@dataclass(frozen=True)
class EngineStatus:
    """Snapshot of engine state for debugging and displays."""

    stage: Stage
    is_active: bool
    verify_reject_count: int
    audit_reject_count: int
    has_record: bool
    record_id: str | None
    attempt_number: int | None


@dataclass(frozen=True)
class StageStatus:
    """UI-facing view of the current stage."""

    stage: Stage
    display_name: str
    activity_text: str
    last_handoff_summary: str
    lane: str
    enabled: bool
