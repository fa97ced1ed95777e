"""Tests for the bundled JSON schemas."""

import jsonschema
import pytest

from sentinelflow.domain.models import HandoffRecord
from sentinelflow.domain.serialization import record_to_dict
from sentinelflow.schemas import (
    get_engine_config_schema,
    get_handoff_schema,
    validate_engine_config,
    validate_handoff,
)


class TestSchemaLoading:
    def test_schemas_are_valid_json_schema(self) -> None:
        jsonschema.Draft202012Validator.check_schema(get_handoff_schema())
        jsonschema.Draft202012Validator.check_schema(get_engine_config_schema())


class TestValidateHandoff:
    def test_serialized_record_is_valid(self, full_record: HandoffRecord) -> None:
        validate_handoff(record_to_dict(full_record))

    def test_payloads_may_be_null(self, full_record: HandoffRecord) -> None:
        data = record_to_dict(full_record)
        data["plan"] = None
        data["audit"] = None

        validate_handoff(data)

    def test_unknown_stage_rejected(self, full_record: HandoffRecord) -> None:
        data = record_to_dict(full_record)
        data["to_stage"] = "designing"

        with pytest.raises(jsonschema.ValidationError):
            validate_handoff(data)

    def test_missing_required_key_rejected(self, full_record: HandoffRecord) -> None:
        data = record_to_dict(full_record)
        del data["status"]

        with pytest.raises(jsonschema.ValidationError):
            validate_handoff(data)

    def test_review_requires_verdict(self, full_record: HandoffRecord) -> None:
        data = record_to_dict(full_record)
        data["code_review"] = {"feedback": "looks fine"}

        with pytest.raises(jsonschema.ValidationError):
            validate_handoff(data)


class TestValidateEngineConfig:
    def test_valid(self) -> None:
        validate_engine_config({"max_verify_retries": 3, "validation_policy": "permissive"})

    def test_additional_properties_rejected(self) -> None:
        with pytest.raises(jsonschema.ValidationError):
            validate_engine_config({"max_retries": 3})
