"""
Infrastructure Database Layer.

This package provides the storage-backed implementations of the repository
interfaces defined in application.ports. The backend (Supabase or in-memory)
is selected only in the composition root (backend.container).

Usage:
    from supabase import create_client
    from infrastructure.db import SupabaseWorkoutRepository, SupabaseExerciseRepository

    client = create_client(SUPABASE_URL, SUPABASE_KEY)
    workout_repo = SupabaseWorkoutRepository(client)
    exercise_repo = SupabaseExerciseRepository(client)
"""

from infrastructure.db.aggregate_mutations import WorkoutAggregateMutations
from infrastructure.db.workout_repository import SupabaseWorkoutRepository
from infrastructure.db.exercise_repository import SupabaseExerciseRepository
from infrastructure.db.in_memory import (
    InMemoryExerciseRepository,
    InMemoryWorkoutRepository,
    load_exercise_catalog,
)

__all__ = [
    # Workout aggregate persistence
    "SupabaseWorkoutRepository",
    "InMemoryWorkoutRepository",
    "WorkoutAggregateMutations",

    # Exercise catalog
    "SupabaseExerciseRepository",
    "InMemoryExerciseRepository",
    "load_exercise_catalog",
]
