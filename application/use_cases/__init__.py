"""
Application Use Cases for the workout parsing service.

This package contains application-level use cases that orchestrate domain logic
and coordinate between ports/adapters. Use cases are the entry points for
business operations and contain the application's workflow logic.

Architecture follows Clean Architecture / Hexagonal pattern:
- Use cases orchestrate domain objects and repository ports
- Dependencies are injected via constructors for testability
- Use cases return domain models, not transport responses

Usage:
    from application.use_cases import (
        ParseWorkoutUseCase,
        ManageWorkoutUseCase,
        EditWorkoutStructureUseCase,
    )

    # Parse free text into a persisted workout
    result = parse_use_case.execute("Bench press 3x10 at 135lbs", user_id="user-1")

    # Whole-aggregate operations
    manage = ManageWorkoutUseCase(workout_repo, exercise_repo)
    copy = manage.duplicate(result.workout.id, user_id="user-1", date="2025-02-01")

    # Nested operations
    edit = EditWorkoutStructureUseCase(workout_repo)
    edit.complete_set(set_id, reps=10, weight=135)
"""

from application.use_cases.parse_workout import (
    ParseWorkoutResult,
    ParseWorkoutUseCase,
)
from application.use_cases.manage_workout import (
    ManageWorkoutUseCase,
    WorkoutListResult,
    build_workout_view,
)
from application.use_cases.edit_workout_structure import EditWorkoutStructureUseCase

__all__ = [
    # ParseWorkout
    "ParseWorkoutUseCase",
    "ParseWorkoutResult",
    # ManageWorkout
    "ManageWorkoutUseCase",
    "WorkoutListResult",
    "build_workout_view",
    # EditWorkoutStructure
    "EditWorkoutStructureUseCase",
]
