"""
LLM-backed DraftProducer.

Converts sanitized workout text into a first WorkoutDraft whose exercises carry
free-text ``exerciseName`` values. Names are mapped to catalog ids later by the
exercise name resolver.
"""

import copy
import logging
from typing import Any, Dict, Optional

from application.exceptions import DraftSchemaError, LLMResponseParseError
from application.ports import LLMGateway, ModelTier, PrefilledJson
from backend.services.draft_schema_fixer import DraftSchemaFixer
from domain.models import WeightUnit, WorkoutDraft
from domain.models.base import utcnow

logger = logging.getLogger(__name__)

EXTRACT_MAX_TOKENS = 8000
EXTRACT_TEMPERATURE = 0.1

EXTRACT_SYSTEM_PROMPT = "You are a workout text parser."

EXTRACT_USER_TEMPLATE = """Convert the unstructured workout text below into structured JSON.

<text>
{text}
</text>

<instructions>
Return a JSON object of this shape:

{{
  "name": "workout name from the text",
  "notes": "workout-level notes, or null",
  "blocks": [
    {{
      "label": "section name such as 'Warm Up' or 'Superset A'",
      "notes": "block-level notes, or null",
      "exercises": [
        {{
          "exerciseName": "Barbell Back Squat",
          "orderInBlock": 0,
          "prescription": "3 x 8-10 (Rest 2 min)",
          "notes": "exercise-level notes, or null",
          "sets": [
            {{"setNumber": 1, "reps": null, "weight": null, "weightUnit": "{weight_unit}", "duration": null, "rpe": null, "notes": null}}
          ]
        }}
      ]
    }}
  ]
}}

Parsing rules:
- exerciseName: the common name with equipment first, e.g. "Dumbbell Bench Press"
- orderInBlock is 0-indexed within each block; setNumber is 1-indexed
- "2x15" means two sets numbered 1 and 2
- For unilateral work ("8/leg", "30 sec/side") create the stated number of sets
- When options are listed ("Bike or row") use the first one
- Exercises in a superset or circuit share the set count given for the group unless the text says otherwise
- Fill reps, weight and duration only when the text states a fixed target for every set (e.g. "3x10 at 135lbs"); otherwise leave them null for the user to fill in
- Use weightUnit "{weight_unit}" unless the text states another unit

Prescription format: "Sets x Reps/Range/Duration x Weight (Rest time)", for example
"3 x 8", "3 x 8-10", "3 x 8 ea.", "3 x 20-30 secs. ea.", "3 x AMAP", "4 sets", "3 x 5 x 150 lbs", "1 x 5 min".
Include rest only for standalone exercises or the last exercise of a superset/circuit.
</instructions>

Respond with the JSON object only."""


class StructureExtractor:
    """
    DraftProducer that asks the strong tier for the initial structure.

    Usage:
        extractor = StructureExtractor(gateway, schema_fixer=DraftSchemaFixer(gateway))
        draft = extractor.produce(text, date="2025-01-15")
    """

    def __init__(self, gateway: LLMGateway, schema_fixer: Optional[DraftSchemaFixer] = None):
        self._gateway = gateway
        self._schema_fixer = schema_fixer or DraftSchemaFixer(gateway, max_iterations=0)

    def produce(
        self,
        text: str,
        *,
        date: str,
        weight_unit: WeightUnit = WeightUnit.LBS,
    ) -> WorkoutDraft:
        try:
            response = self._gateway.call(
                EXTRACT_SYSTEM_PROMPT,
                EXTRACT_USER_TEMPLATE.format(text=text, weight_unit=weight_unit.value),
                ModelTier.STRONG,
                temperature=EXTRACT_TEMPERATURE,
                max_tokens=EXTRACT_MAX_TOKENS,
                decoding=PrefilledJson(),
            )
        except LLMResponseParseError as e:
            raise DraftSchemaError(f"Structure extraction response parsing failed: {e.message}") from e

        payload = response.content
        if isinstance(payload, dict):
            payload = self._with_defaults(payload, date=date, weight_unit=weight_unit)

        draft = self._schema_fixer.repair(text, payload)
        logger.info(
            f"Extracted draft '{draft.name}' with {len(draft.blocks)} block(s) "
            f"and {len(draft.unresolved_names)} exercise name(s)"
        )
        return draft

    @staticmethod
    def _with_defaults(payload: Dict[str, Any], *, date: str, weight_unit: WeightUnit) -> Dict[str, Any]:
        result = copy.deepcopy(payload)
        result["date"] = date
        result["lastModifiedTime"] = utcnow().isoformat()
        for block in result.get("blocks") or []:
            if not isinstance(block, dict):
                continue
            for exercise in block.get("exercises") or []:
                if not isinstance(exercise, dict):
                    continue
                for set_entry in exercise.get("sets") or []:
                    if isinstance(set_entry, dict):
                        set_entry.setdefault("weightUnit", weight_unit.value)
        return result
