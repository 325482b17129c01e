"""
Domain models for the workout parsing service.

This package contains pure domain models that are independent of
infrastructure concerns (database, LLM provider, cache).

These models represent the core business concepts:
- Workout: The aggregate root containing ordered blocks
- Block: A group of exercise instances performed together
- ExerciseInstance: A catalog exercise prescribed within a block
- SetEntry: A single set, with nullable performance values
- WorkoutDraft: The in-progress structure produced from source text
- ValidationResult: The workout-content classifier verdict

Usage:
    >>> from domain.models import Workout, Block, ExerciseInstance, SetEntry

    >>> workout = Workout(
    ...     name="Leg Day",
    ...     date="2025-01-15",
    ...     blocks=[Block(exercises=[ExerciseInstance(exercise_id="back-squat")])],
    ... )

    >>> # Serialize to camelCase JSON
    >>> json_str = workout.model_dump_json(by_alias=True)

    >>> # Deserialize from JSON
    >>> workout = Workout.model_validate_json(json_str)
"""

from domain.models.block import Block
from domain.models.draft import DraftBlock, DraftExercise, DraftSet, WorkoutDraft
from domain.models.exercise import Exercise
from domain.models.exercise_instance import ExerciseInstance
from domain.models.set_entry import SetEntry, SetUpdate, WeightUnit
from domain.models.validation import ValidationResult
from domain.models.workout import Workout

__all__ = [
    # Aggregate
    "Workout",
    "Block",
    "ExerciseInstance",
    "SetEntry",
    "SetUpdate",
    # Catalog
    "Exercise",
    # Drafts
    "WorkoutDraft",
    "DraftBlock",
    "DraftExercise",
    "DraftSet",
    # Classification
    "ValidationResult",
    # Enums
    "WeightUnit",
]
