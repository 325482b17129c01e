"""
Domain converters for the Workout aggregate.

- draft_to_workout: resolved WorkoutDraft (pipeline output) -> Workout
- db_row_to_workout: Database row (from Supabase) -> Workout
- workout_to_db_row: Workout -> Database row (for persistence)

All converters are pure functions with no side effects.
"""

from domain.converters.db_converters import db_row_to_workout, workout_to_db_row
from domain.converters.draft_to_workout import draft_to_workout

__all__ = [
    "draft_to_workout",
    "db_row_to_workout",
    "workout_to_db_row",
]
