"""
Workout draft models.

A draft is the in-progress structured workout produced from source text and
repaired by the pipeline before it becomes a persisted Workout. Drafts carry
no entity ids. Exercises start with a free-text ``exercise_name`` and gain an
``exercise_id`` once resolved against the exercise catalog.

On the wire (LLM prompts and responses) drafts use camelCase keys:

    {
      "name": "Push Day",
      "date": "2025-01-15",
      "blocks": [
        {"label": "Main", "exercises": [
          {"exerciseId": "bench-press", "orderInBlock": 0, "prescription": "3 x 10",
           "sets": [{"setNumber": 1, "reps": null, "weight": null, "weightUnit": "lbs",
                     "duration": null, "rpe": null, "notes": null}]}
        ]}
      ]
    }
"""

from typing import Iterator, List, Optional, Tuple

from pydantic import Field, field_validator, model_validator

from domain.models.base import CamelModel
from domain.models.set_entry import WeightUnit
from domain.models.workout import validate_iso_date


class DraftSet(CamelModel):
    set_number: int = Field(..., ge=1)
    reps: Optional[int] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    weight_unit: WeightUnit = WeightUnit.LBS
    duration: Optional[int] = Field(default=None, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None


class DraftExercise(CamelModel):
    """An exercise mention in a draft, resolved or not."""

    exercise_id: Optional[str] = Field(default=None, description="Catalog id once resolved")
    exercise_name: Optional[str] = Field(default=None, description="Free-text name from the source")
    order_in_block: int = Field(default=0, ge=0)
    prescription: Optional[str] = None
    notes: Optional[str] = None
    sets: List[DraftSet] = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_reference(self) -> "DraftExercise":
        if not self.exercise_id and not self.exercise_name:
            raise ValueError("exercise requires exerciseId or exerciseName")
        return self

    @property
    def is_resolved(self) -> bool:
        return bool(self.exercise_id)


class DraftBlock(CamelModel):
    label: Optional[str] = None
    notes: Optional[str] = None
    exercises: List[DraftExercise] = Field(..., min_length=1)


class WorkoutDraft(CamelModel):
    """Structured draft of a workout, not yet persisted."""

    name: str = Field(..., min_length=1)
    date: str = Field(..., description="YYYY-MM-DD")
    last_modified_time: Optional[str] = Field(default=None, description="ISO-8601 timestamp")
    notes: Optional[str] = None
    blocks: List[DraftBlock] = Field(..., min_length=1)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return validate_iso_date(v)

    def iter_exercises(self) -> Iterator[Tuple[int, int, DraftExercise]]:
        """Yield (block_index, exercise_index, exercise) in document order."""
        for block_index, block in enumerate(self.blocks):
            for exercise_index, exercise in enumerate(block.exercises):
                yield block_index, exercise_index, exercise

    @property
    def exercise_ids(self) -> List[Optional[str]]:
        return [e.exercise_id for _, _, e in self.iter_exercises()]

    @property
    def unresolved_names(self) -> List[str]:
        return [
            e.exercise_name or ""
            for _, _, e in self.iter_exercises()
            if not e.is_resolved
        ]

    @property
    def is_resolved(self) -> bool:
        return all(e.is_resolved for _, _, e in self.iter_exercises())
