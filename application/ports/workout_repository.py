"""
Workout Repository Interface (Port).

This module defines the abstract interface for Workout aggregate persistence.
Implementations may use Supabase, in-memory storage, or other backends; the
backend is chosen only at composition time.

The Workout is the unit of persistence. Structural sub-operations address a
nested entity by id, resolve the owning workout, and write the whole aggregate
back. They return the updated aggregate, or None when no owning workout
resolves.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from domain.models import Block, ExerciseInstance, SetUpdate, Workout


@dataclass
class WorkoutPage:
    """One page of a user's workouts."""
    workouts: List[Workout] = field(default_factory=list)
    total: int = 0


class WorkoutRepository(Protocol):
    """
    Abstract interface for workout persistence operations.

    Domain types are used instead of database-specific types to maintain
    clean architecture boundaries.
    """

    # -------------------------------------------------------------------------
    # Aggregate CRUD
    # -------------------------------------------------------------------------

    def create(self, workout: Workout) -> Workout:
        """
        Persist a new workout.

        Args:
            workout: Aggregate to store (ids already assigned)

        Returns:
            The stored workout

        Raises:
            PersistenceError: If the write fails
        """
        ...

    def find_by_id(self, workout_id: str, user_id: Optional[str] = None) -> Optional[Workout]:
        """
        Get a workout by id.

        Args:
            workout_id: Workout id
            user_id: When given, only a workout owned by this user is returned

        Returns:
            Workout or None if not found

        Raises:
            PersistenceError: If the read fails
        """
        ...

    def update(self, workout: Workout) -> Optional[Workout]:
        """
        Replace the stored aggregate with ``workout`` (last write wins).

        Returns:
            The stored workout, or None if it does not exist
        """
        ...

    def delete(self, workout_id: str, user_id: Optional[str] = None) -> bool:
        """
        Delete a workout and everything nested beneath it.

        Returns:
            True if a workout was deleted
        """
        ...

    def find_by_user_id(
        self,
        user_id: str,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> WorkoutPage:
        """
        List a user's workouts, newest date first.

        Args:
            user_id: Owning user
            date_from: Inclusive lower bound (YYYY-MM-DD)
            date_to: Inclusive upper bound (YYYY-MM-DD)
            limit: Page size
            offset: Number of workouts to skip

        Returns:
            WorkoutPage with the page and the total matching count

        Raises:
            PersistenceError: If the read fails
        """
        ...

    # -------------------------------------------------------------------------
    # Nested id resolution
    # -------------------------------------------------------------------------

    def find_workout_id_by_block_id(self, block_id: str) -> Optional[str]:
        """Get the id of the workout owning a block."""
        ...

    def find_workout_id_by_exercise_id(self, exercise_instance_id: str) -> Optional[str]:
        """Get the id of the workout owning an exercise instance."""
        ...

    def find_workout_id_by_set_id(self, set_id: str) -> Optional[str]:
        """Get the id of the workout owning a set."""
        ...

    # -------------------------------------------------------------------------
    # Structural sub-operations (whole-aggregate read-modify-write)
    # -------------------------------------------------------------------------

    def add_block(self, workout_id: str, block: Block) -> Optional[Workout]:
        """Append a block (fresh ids at every level) to a workout."""
        ...

    def delete_block(self, block_id: str) -> Optional[Workout]:
        """Remove a block from its owning workout."""
        ...

    def add_exercise_to_block(self, block_id: str, exercise: ExerciseInstance) -> Optional[Workout]:
        """Append an exercise instance (and its sets) to a block."""
        ...

    def delete_exercise_instance(self, exercise_instance_id: str) -> Optional[Workout]:
        """Remove an exercise instance from its owning block."""
        ...

    def update_set(self, set_id: str, update: SetUpdate) -> Optional[Workout]:
        """Apply a partial update to one set."""
        ...
