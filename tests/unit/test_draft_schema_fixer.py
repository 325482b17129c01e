"""
Unit tests for DraftSchemaFixer.

Tests for:
- Valid payloads pass without any call
- Bounded repair rounds
- DraftSchemaError after the iteration limit or on unparseable repair output
"""

import pytest

from application.exceptions import DraftSchemaError, LLMResponseParseError
from application.ports import ModelTier
from backend.services.draft_schema_fixer import DraftSchemaFixer
from tests.fakes import FakeLLMGateway, draft_payload

TEXT = "Bench press 3x10 at 135lbs"


def broken_payload():
    payload = draft_payload()
    payload["blocks"][0]["exercises"][0]["sets"][0]["setNumber"] = 0
    return payload


@pytest.fixture
def gateway():
    return FakeLLMGateway()


class TestCheck:
    """Tests for DraftSchemaFixer.check."""

    @pytest.mark.unit
    def test_valid_payload_has_no_errors(self):
        assert DraftSchemaFixer.check(draft_payload()) == []

    @pytest.mark.unit
    def test_errors_carry_paths(self):
        errors = DraftSchemaFixer.check(broken_payload())
        assert len(errors) == 1
        assert errors[0].startswith("blocks.0.exercises.0.sets.0.setNumber")

    @pytest.mark.unit
    def test_missing_blocks(self):
        errors = DraftSchemaFixer.check({"name": "X", "date": "2025-01-15", "blocks": []})
        assert any(e.startswith("blocks") for e in errors)

    @pytest.mark.unit
    def test_bad_date(self):
        payload = draft_payload(date="15/01/2025")
        assert any(e.startswith("date") for e in DraftSchemaFixer.check(payload))


class TestRepair:
    """Tests for DraftSchemaFixer.repair."""

    @pytest.mark.unit
    def test_valid_payload_makes_no_call(self, gateway):
        draft = DraftSchemaFixer(gateway).repair(TEXT, draft_payload())
        assert draft.name == "Bench Day"
        assert gateway.call_count == 0

    @pytest.mark.unit
    def test_one_repair_round(self, gateway):
        gateway.queue(draft_payload())

        draft = DraftSchemaFixer(gateway).repair(TEXT, broken_payload())

        assert draft.blocks[0].exercises[0].sets[0].set_number == 1
        assert gateway.call_count == 1
        call = gateway.calls[0]
        assert call.tier == ModelTier.STRONG
        assert "<schema_errors>" in call.user_message
        assert "setNumber" in call.user_message

    @pytest.mark.unit
    def test_iterations_exhausted_raises(self, gateway):
        gateway.queue(broken_payload(), broken_payload())

        with pytest.raises(DraftSchemaError) as exc_info:
            DraftSchemaFixer(gateway, max_iterations=2).repair(TEXT, broken_payload())

        assert gateway.call_count == 2
        assert exc_info.value.errors
        assert exc_info.value.status_code == 500

    @pytest.mark.unit
    def test_zero_iterations_validates_only(self, gateway):
        with pytest.raises(DraftSchemaError):
            DraftSchemaFixer(gateway, max_iterations=0).repair(TEXT, broken_payload())
        assert gateway.call_count == 0

    @pytest.mark.unit
    def test_unparseable_repair_raises(self, gateway):
        gateway.queue_error(LLMResponseParseError("not json"))
        with pytest.raises(DraftSchemaError, match="parsing failed"):
            DraftSchemaFixer(gateway).repair(TEXT, broken_payload())
