"""
Engine configuration loading.

Reads a JSON file, validates it against engine_config.schema.json and
builds an EngineConfig. Keys that are absent keep their defaults.
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from sentinelflow.domain.config import EngineConfig
from sentinelflow.domain.exceptions import ConfigError
from sentinelflow.domain.validation import ValidationPolicy
from sentinelflow.schemas import validate_engine_config

logger = logging.getLogger(__name__)


def engine_config_from_dict(data: dict[str, Any]) -> EngineConfig:
    """
    Raises:
        ConfigError: If ``data`` does not match the schema
    """
    try:
        validate_engine_config(data)
    except jsonschema.ValidationError as e:
        raise ConfigError(f"Invalid engine configuration: {e.message}") from e

    kwargs: dict[str, Any] = {}
    if "max_verify_retries" in data:
        kwargs["max_verify_retries"] = data["max_verify_retries"]
    if "max_audit_retries" in data:
        kwargs["max_audit_retries"] = data["max_audit_retries"]
    if "validation_policy" in data:
        kwargs["validation_policy"] = ValidationPolicy(data["validation_policy"])
    return EngineConfig(**kwargs)


def load_engine_config(path: str | Path) -> EngineConfig:
    """Load engine configuration from a JSON file.

    Raises:
        ConfigError: If the file is missing, not JSON, or invalid
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration file is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a JSON object: {path}")

    config = engine_config_from_dict(data)
    logger.debug("Loaded engine configuration from %s: %s", path, config)
    return config
