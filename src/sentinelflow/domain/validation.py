"""
Handoff validation strategies.

The default policy is permissive: every record may enter every stage, and
workers cope with missing context themselves. The structural policy checks
that the payload a stage consumes is present before it starts.
"""

from enum import Enum

from sentinelflow.domain.interfaces import HandoffValidatorInterface
from sentinelflow.domain.models import HandoffRecord, ValidationError
from sentinelflow.domain.stages import Stage


class ValidationPolicy(str, Enum):
    PERMISSIVE = "permissive"
    STRUCTURAL = "structural"


class PermissiveValidator(HandoffValidatorInterface):
    """Accepts every record."""

    def validate(self, record: HandoffRecord, target: Stage) -> list[ValidationError]:
        return []


class RequiredPayloadValidator(HandoffValidatorInterface):
    """Structural presence checks for the payload each stage consumes."""

    def validate(self, record: HandoffRecord, target: Stage) -> list[ValidationError]:
        errors: list[ValidationError] = []

        if target == Stage.IMPLEMENTING:
            if record.plan is None:
                errors.append(ValidationError("plan", "required by implementing"))
            elif not record.plan.tasks:
                errors.append(ValidationError("plan.tasks", "plan has no tasks"))

        elif target in (Stage.REVIEW_CODE, Stage.VERIFYING):
            if record.implementation is None:
                errors.append(
                    ValidationError("implementation", f"required by {target.value}")
                )
            elif not record.implementation.target_url:
                errors.append(
                    ValidationError("implementation.target_url", "must not be empty")
                )

        elif target in (Stage.REVIEW_TESTS, Stage.AUDITING):
            if record.verification is None:
                errors.append(
                    ValidationError("verification", f"required by {target.value}")
                )

        elif target == Stage.REVIEW_FINAL:
            if record.audit is None:
                errors.append(ValidationError("audit", "required by review_final"))

        elif target == Stage.COMPLETED:
            if record.final_review is None:
                errors.append(ValidationError("final_review", "required by completed"))

        return errors


def make_validator(policy: ValidationPolicy) -> HandoffValidatorInterface:
    if policy == ValidationPolicy.STRUCTURAL:
        return RequiredPayloadValidator()
    return PermissiveValidator()
