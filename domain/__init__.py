"""
Domain layer for the workout parsing service.

This package contains pure domain models and converters that are independent
of infrastructure concerns (database, LLM provider, cache).
"""

from domain.models import (
    Block,
    ExerciseInstance,
    SetEntry,
    SetUpdate,
    ValidationResult,
    WeightUnit,
    Workout,
    WorkoutDraft,
)

__all__ = [
    "Block",
    "ExerciseInstance",
    "SetEntry",
    "SetUpdate",
    "ValidationResult",
    "WeightUnit",
    "Workout",
    "WorkoutDraft",
]
