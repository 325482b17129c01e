"""
Schema repair for raw workout drafts.

Validates a raw draft payload against the WorkoutDraft model and, while it is
invalid, asks the strong tier to correct the listed schema errors. Bounded by
``max_iterations`` repair rounds.
"""

import json
import logging
from typing import Any, List

from pydantic import ValidationError

from application.exceptions import DraftSchemaError, LLMResponseParseError
from application.ports import LLMGateway, ModelTier, PrefilledJson
from domain.models import WorkoutDraft
from domain.models.base import describe_validation_error

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 3
FIX_MAX_TOKENS = 8000

SCHEMA_FIX_SYSTEM_PROMPT = (
    "You are an expert fitness assistant that fixes schema errors in parsed workouts."
)

SCHEMA_FIX_USER_TEMPLATE = """Fix the schema errors in this parsed workout.

<original_text>
{original_text}
</original_text>

<parsed_workout>
{parsed_workout}
</parsed_workout>

<schema_errors>
{errors}
</schema_errors>

<instructions>
Required shape:
- name: non-empty string
- date: string in YYYY-MM-DD format
- blocks: at least one block; each block has "exercises" (at least one) and optional "label" and "notes"
- each exercise: "exerciseName" (string) or "exerciseId" (string), "orderInBlock" (integer >= 0), "sets" (at least one), optional "prescription" and "notes"
- each set: "setNumber" (integer >= 1), "weightUnit" ("lbs" or "kg"), "reps", "weight", "duration" (number or null), "rpe" (1-10 or null), "notes" (string or null)

Convert types where needed (e.g. "1" to 1, "pounds" to "lbs", "kilograms" to "kg").
Keep every exerciseId and exerciseName exactly as it is.
Keep every other value unchanged.

Respond with the corrected workout JSON only.
</instructions>"""


class DraftSchemaFixer:
    """
    Turns a raw draft payload into a valid WorkoutDraft.

    Usage:
        fixer = DraftSchemaFixer(gateway)
        draft = fixer.repair(text, payload)  # raises DraftSchemaError if still invalid
    """

    def __init__(self, gateway: LLMGateway, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {max_iterations}")
        self._gateway = gateway
        self._max_iterations = max_iterations

    @staticmethod
    def check(payload: Any) -> List[str]:
        """Schema errors for ``payload`` (empty when valid)."""
        try:
            WorkoutDraft.model_validate(payload)
        except ValidationError as e:
            return describe_validation_error(e)
        return []

    def repair(self, original_text: str, payload: Any) -> WorkoutDraft:
        """
        Validate and, if needed, repair a raw draft payload.

        Raises:
            DraftSchemaError: Still invalid after the repair iteration limit, or a repair
                response was not JSON
            LLMCallError: Provider failure
        """
        current = payload
        for attempt in range(self._max_iterations + 1):
            try:
                return WorkoutDraft.model_validate(current)
            except ValidationError as e:
                errors = describe_validation_error(e)

            if attempt == self._max_iterations:
                break

            logger.info(
                f"Draft has {len(errors)} schema error(s); repair round {attempt + 1}/{self._max_iterations}"
            )
            current = self._apply_fixes(original_text, current, errors)

        logger.warning(f"Draft still invalid after {self._max_iterations} repair round(s): {errors}")
        raise DraftSchemaError(
            f"Parsed workout does not match the expected structure: {'; '.join(errors)}",
            errors=errors,
        )

    def _apply_fixes(self, original_text: str, payload: Any, errors: List[str]) -> Any:
        user_message = SCHEMA_FIX_USER_TEMPLATE.format(
            original_text=original_text,
            parsed_workout=json.dumps(payload, indent=2, default=str),
            errors="\n".join(f"- {error}" for error in errors),
        )
        try:
            response = self._gateway.call(
                SCHEMA_FIX_SYSTEM_PROMPT,
                user_message,
                ModelTier.STRONG,
                temperature=0.0,
                max_tokens=FIX_MAX_TOKENS,
                decoding=PrefilledJson(),
            )
        except LLMResponseParseError as e:
            raise DraftSchemaError(f"Schema repair response parsing failed: {e.message}") from e
        return response.content
