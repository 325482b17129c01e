"""
Workout content gate.

One deterministic call to the fast tier decides whether text is workout
content at all, so recipes, code and narrative text are rejected before the
more expensive extraction and repair stages run.
"""

import logging

from pydantic import ValidationError

from application.exceptions import ClassificationParseError, LLMResponseParseError
from application.ports import LLMGateway, ModelTier, PrefilledJson
from domain.models import ValidationResult
from domain.models.base import describe_validation_error

logger = logging.getLogger(__name__)

CLASSIFIER_MAX_TOKENS = 200

CLASSIFIER_SYSTEM_PROMPT = """You are a workout content validator. Decide whether the provided text is workout-related content.

<instructions>
Determine whether the text describes a fitness workout, exercise routine, training session or a similar plan of physical activity.

Respond with a JSON object of this shape:
{
  "isWorkout": true|false,
  "confidence": 0.0-1.0,
  "reason": "Short explanation when the text is not a workout"
}

Workout content includes:
- Lists of exercises with sets and reps
- Training programs and workout routines
- Warm-up and cool-down sequences
- Fitness class outlines
- Athletic training plans

Not workout content:
- Recipes or meal plans
- Random or unrelated text
- Source code or technical documentation
- Stories and narratives
- Any other non-fitness content
</instructions>

<example>
<input>
## Lower Body Strength + Power

**Warm Up / Activation**
- Light cardio: 5 min
- Glute bridges: 2x15

**Superset A (4 sets, 2-3 min rest)**
1. Back Squat or Trap Bar Deadlift: 6-8 reps
2. Box Jumps: 5 reps
</input>

<output>
{"isWorkout": true, "confidence": 1.0}
</output>
</example>

Respond with JSON only."""


class WorkoutValidator:
    """
    Classifies text as workout / non-workout content.

    Usage:
        validator = WorkoutValidator(gateway)
        result = validator.classify("Bench press 3x10 at 135lbs")
        result.is_workout, result.confidence
    """

    def __init__(self, gateway: LLMGateway):
        self._gateway = gateway

    def classify(self, text: str) -> ValidationResult:
        """
        Classify sanitized text.

        Raises:
            ClassificationParseError: Model output is not {isWorkout, confidence, reason?}
            LLMCallError: Provider failure
        """
        try:
            response = self._gateway.call(
                CLASSIFIER_SYSTEM_PROMPT,
                f"Validate the following text:\n\n<text>\n{text}\n</text>",
                ModelTier.FAST,
                temperature=0.0,
                max_tokens=CLASSIFIER_MAX_TOKENS,
                decoding=PrefilledJson(),
            )
        except LLMResponseParseError as e:
            raise ClassificationParseError(
                f"Classifier response parsing failed: {e.message}"
            ) from e

        try:
            result = ValidationResult.model_validate(response.content)
        except ValidationError as e:
            details = ", ".join(describe_validation_error(e))
            raise ClassificationParseError(
                f"Classifier response parsing failed: {details}"
            ) from e

        logger.info(
            f"Classified text as workout={result.is_workout} (confidence={result.confidence:.2f})"
        )
        return result
