"""Engine configuration."""

from dataclasses import dataclass

from sentinelflow.domain.exceptions import ConfigError
from sentinelflow.domain.validation import ValidationPolicy

DEFAULT_MAX_VERIFY_RETRIES = 3
DEFAULT_MAX_AUDIT_RETRIES = 2


@dataclass(frozen=True)
class EngineConfig:
    """Retry limits and validation policy for one run."""

    max_verify_retries: int = DEFAULT_MAX_VERIFY_RETRIES
    max_audit_retries: int = DEFAULT_MAX_AUDIT_RETRIES
    validation_policy: ValidationPolicy = ValidationPolicy.PERMISSIVE

    def __post_init__(self) -> None:
        if self.max_verify_retries < 1:
            raise ConfigError(
                f"max_verify_retries must be >= 1, got {self.max_verify_retries}"
            )
        if self.max_audit_retries < 1:
            raise ConfigError(
                f"max_audit_retries must be >= 1, got {self.max_audit_retries}"
            )
