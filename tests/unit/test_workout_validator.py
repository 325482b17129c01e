"""
Unit tests for WorkoutValidator.

Tests for:
- Classification parsing
- Tier, temperature and decoding used for the call
- Malformed output raises ClassificationParseError
"""

import pytest

from application.exceptions import ClassificationParseError, LLMCallError
from application.ports import ModelTier, PrefilledJson
from backend.services.workout_validator import WorkoutValidator
from tests.fakes import FakeLLMGateway


@pytest.fixture
def gateway():
    return FakeLLMGateway()


class TestClassify:
    """Tests for WorkoutValidator.classify."""

    @pytest.mark.unit
    def test_workout_text_classified(self, gateway):
        gateway.queue({"isWorkout": True, "confidence": 0.95})
        result = WorkoutValidator(gateway).classify("Bench press 3x10 at 135lbs")

        assert result.is_workout is True
        assert result.confidence == 0.95
        assert result.reason is None

    @pytest.mark.unit
    def test_non_workout_with_reason(self, gateway):
        gateway.queue({"isWorkout": False, "confidence": 0.9, "reason": "This is a recipe"})
        result = WorkoutValidator(gateway).classify("Mix flour and eggs")

        assert result.is_workout is False
        assert result.reason == "This is a recipe"

    @pytest.mark.unit
    def test_single_deterministic_fast_call(self, gateway):
        gateway.queue({"isWorkout": True, "confidence": 1.0})
        WorkoutValidator(gateway).classify("Squats 5x5")

        assert gateway.call_count == 1
        call = gateway.calls[0]
        assert call.tier == ModelTier.FAST
        assert call.temperature == 0.0
        assert isinstance(call.decoding, PrefilledJson)
        assert "<text>\nSquats 5x5\n</text>" in call.user_message

    @pytest.mark.unit
    def test_prefilled_text_response_decoded(self, gateway):
        gateway.queue('"isWorkout": true, "confidence": 0.8}')
        result = WorkoutValidator(gateway).classify("Rows 3x12")
        assert result.is_workout is True
        assert result.confidence == 0.8


class TestClassifyErrors:
    """Malformed classifier output is fatal for the request."""

    @pytest.mark.unit
    def test_non_json_raises(self, gateway):
        gateway.queue("I think this is a workout")
        with pytest.raises(ClassificationParseError):
            WorkoutValidator(gateway).classify("Rows 3x12")

    @pytest.mark.unit
    def test_missing_fields_raise(self, gateway):
        gateway.queue({"confidence": 0.9})
        with pytest.raises(ClassificationParseError):
            WorkoutValidator(gateway).classify("Rows 3x12")

    @pytest.mark.unit
    def test_confidence_out_of_range_raises(self, gateway):
        gateway.queue({"isWorkout": True, "confidence": 1.5})
        with pytest.raises(ClassificationParseError):
            WorkoutValidator(gateway).classify("Rows 3x12")

    @pytest.mark.unit
    def test_parse_error_status(self, gateway):
        gateway.queue({"isWorkout": "maybe"})
        with pytest.raises(ClassificationParseError) as exc_info:
            WorkoutValidator(gateway).classify("Rows 3x12")
        assert exc_info.value.status_code == 500

    @pytest.mark.unit
    def test_transport_error_propagates(self, gateway):
        gateway.queue_error(LLMCallError("connection reset"))
        with pytest.raises(LLMCallError):
            WorkoutValidator(gateway).classify("Rows 3x12")
