"""SentinelFlow JSON Schema definitions and validation utilities.

Schemas:
    - handoff.schema.json: Handoff record wire format
    - engine_config.schema.json: Engine configuration file

Usage:
    from sentinelflow.schemas import validate_handoff

    with open("handoff.json") as f:
        data = json.load(f)
    validate_handoff(data)  # Raises jsonschema.ValidationError if invalid
"""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any

import jsonschema


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'handoff.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("sentinelflow.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_handoff_schema() -> dict[str, Any]:
    """Get the handoff record schema."""
    return _load_schema("handoff.schema.json")


def get_engine_config_schema() -> dict[str, Any]:
    """Get the engine configuration schema."""
    return _load_schema("engine_config.schema.json")


def validate_handoff(data: dict[str, Any]) -> None:
    """Validate a serialized handoff record against the schema.

    Args:
        data: Record dictionary as produced by record_to_dict

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_handoff_schema())


def validate_engine_config(data: dict[str, Any]) -> None:
    """Validate an engine configuration dictionary.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_engine_config_schema())


__all__ = [
    "get_handoff_schema",
    "get_engine_config_schema",
    "validate_handoff",
    "validate_engine_config",
]
