"""
Pipeline stages and their static metadata.

The pipeline is supervised: the planner re-checks the output of every
worker stage before the run moves on.

    IDLE → PLANNING → IMPLEMENTING → REVIEW_CODE → VERIFYING →
    REVIEW_TESTS → AUDITING → REVIEW_FINAL → COMPLETED
"""

from enum import Enum


class Stage(str, Enum):
    """Where the pipeline currently is."""

    IDLE = "idle"  # Entry state, no record
    PLANNING = "planning"
    IMPLEMENTING = "implementing"
    REVIEW_CODE = "review_code"  # Planner reviews implementation
    VERIFYING = "verifying"
    REVIEW_TESTS = "review_tests"  # Planner reviews verification
    AUDITING = "auditing"
    REVIEW_FINAL = "review_final"  # Planner reviews audit
    COMPLETED = "completed"  # Terminal
    BLOCKED = "blocked"  # Terminal until reset, reached only via escalation


TERMINAL_STAGES: frozenset[Stage] = frozenset({Stage.COMPLETED, Stage.BLOCKED})

# Position in the pipeline; a move to a lower position is a loop-back.
PIPELINE_ORDER: dict[Stage, int] = {
    Stage.IDLE: 0,
    Stage.PLANNING: 1,
    Stage.IMPLEMENTING: 2,
    Stage.REVIEW_CODE: 3,
    Stage.VERIFYING: 4,
    Stage.REVIEW_TESTS: 5,
    Stage.AUDITING: 6,
    Stage.REVIEW_FINAL: 7,
    Stage.COMPLETED: 8,
    Stage.BLOCKED: 8,
}

# Worker persona activated for a stage. Stages without a worker never
# reach the worker switcher.
_WORKER_IDS: dict[Stage, str] = {
    Stage.PLANNING: "planner",
    Stage.IMPLEMENTING: "implementer",
    Stage.REVIEW_CODE: "code-reviewer",
    Stage.VERIFYING: "verifier",
    Stage.REVIEW_TESTS: "test-reviewer",
    Stage.AUDITING: "auditor",
    Stage.REVIEW_FINAL: "final-reviewer",
}

_DISPLAY_NAMES: dict[Stage, str] = {
    Stage.IDLE: "Idle",
    Stage.PLANNING: "Planner",
    Stage.IMPLEMENTING: "Implementer",
    Stage.REVIEW_CODE: "Planner (Code Review)",
    Stage.VERIFYING: "Verifier",
    Stage.REVIEW_TESTS: "Planner (Test Review)",
    Stage.AUDITING: "Security Auditor",
    Stage.REVIEW_FINAL: "Planner (Final Review)",
    Stage.COMPLETED: "Completed",
    Stage.BLOCKED: "Blocked",
}

_ACTIVITIES: dict[Stage, str] = {
    Stage.IDLE: "",
    Stage.PLANNING: "Creating implementation plan...",
    Stage.IMPLEMENTING: "Writing code and implementing features...",
    Stage.REVIEW_CODE: "Reviewing code quality against the plan...",
    Stage.VERIFYING: "Running test scenarios and visual checkpoints...",
    Stage.REVIEW_TESTS: "Reviewing test coverage and results...",
    Stage.AUDITING: "Performing security audit...",
    Stage.REVIEW_FINAL: "Reviewing audit and preparing final summary...",
    Stage.COMPLETED: "Workflow complete",
    Stage.BLOCKED: "Waiting for human intervention...",
}

# Coarse lane used by status displays; the three planner reviews share one.
_UI_LANES: dict[Stage, str] = {
    Stage.IDLE: "IDLE",
    Stage.PLANNING: "PLANNER",
    Stage.IMPLEMENTING: "IMPLEMENTER",
    Stage.REVIEW_CODE: "REVIEW",
    Stage.VERIFYING: "VERIFIER",
    Stage.REVIEW_TESTS: "REVIEW",
    Stage.AUDITING: "AUDITOR",
    Stage.REVIEW_FINAL: "REVIEW",
    Stage.COMPLETED: "COMPLETED",
    Stage.BLOCKED: "BLOCKED",
}


def worker_for(stage: Stage) -> str | None:
    """Worker id for a stage, or None for IDLE/COMPLETED/BLOCKED."""
    return _WORKER_IDS.get(stage)


def display_name(stage: Stage) -> str:
    return _DISPLAY_NAMES[stage]


def activity_text(stage: Stage) -> str:
    return _ACTIVITIES[stage]


def ui_lane(stage: Stage) -> str:
    return _UI_LANES[stage]


def is_loop_back(from_stage: Stage, to_stage: Stage) -> bool:
    """True if moving from ``from_stage`` to ``to_stage`` goes backwards."""
    return PIPELINE_ORDER[to_stage] < PIPELINE_ORDER[from_stage]
