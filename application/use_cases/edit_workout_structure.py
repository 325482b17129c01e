"""
Edit Workout Structure Use Case.

Block, exercise and set operations on a persisted workout. Each operation
addresses a nested entity by id; the repository resolves the owning workout
and writes the whole aggregate back, so a failed write never leaves a half
updated structure. An id that resolves to no workout raises AggregateNotFound.
"""
import logging
from typing import Dict, Optional

from application.exceptions import AggregateNotFound, PersistenceError
from application.ports import WorkoutRepository
from domain.models import Block, ExerciseInstance, SetUpdate, Workout

logger = logging.getLogger(__name__)


class EditWorkoutStructureUseCase:
    """
    Use case for structural workout mutations.

    Every mutation refreshes the workout's last_modified_time. There is no
    concurrency token: concurrent writers on one workout resolve as last write
    wins.
    """

    def __init__(self, workout_repo: WorkoutRepository):
        """
        Initialize with required dependencies.

        Args:
            workout_repo: Repository for workout persistence
        """
        self._workout_repo = workout_repo

    def _require_workout(self, workout_id: Optional[str], user_id: Optional[str], entity: str, entity_id: str) -> Workout:
        workout = self._workout_repo.find_by_id(workout_id, user_id) if workout_id else None
        if workout is None:
            raise AggregateNotFound(entity, entity_id)
        return workout

    def _check_owner(self, workout_id: Optional[str], user_id: Optional[str], entity: str, entity_id: str) -> None:
        if workout_id is None:
            raise AggregateNotFound(entity, entity_id)
        if user_id is not None:
            self._require_workout(workout_id, user_id, entity, entity_id)

    def _save(self, workout: Workout) -> Workout:
        saved = self._workout_repo.update(workout)
        if saved is None:
            raise PersistenceError(f"Workout not found after update: {workout.id}")
        return saved

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def add_block(self, workout_id: str, block: Block, user_id: Optional[str] = None) -> Workout:
        """Append a block; it and everything it carries get fresh ids."""
        self._check_owner(workout_id, user_id, "Workout", workout_id)
        updated = self._workout_repo.add_block(workout_id, block)
        if updated is None:
            raise AggregateNotFound("Workout", workout_id)
        logger.info(f"Block added to workout {workout_id}")
        return updated

    def remove_block(self, block_id: str, user_id: Optional[str] = None) -> Workout:
        workout_id = self._workout_repo.find_workout_id_by_block_id(block_id)
        self._check_owner(workout_id, user_id, "Block", block_id)
        updated = self._workout_repo.delete_block(block_id)
        if updated is None:
            raise AggregateNotFound("Block", block_id)
        return updated

    def reorder_blocks(
        self,
        workout_id: str,
        order: Dict[str, int],
        user_id: Optional[str] = None,
    ) -> Workout:
        """
        Re-sort the workout's blocks by ``order`` (block id -> position).

        Blocks missing from ``order`` sort after all mapped blocks; ties keep
        their previous relative order.
        """
        workout = self._require_workout(workout_id, user_id, "Workout", workout_id)
        return self._save(workout.with_blocks_reordered(order))

    # -------------------------------------------------------------------------
    # Exercises
    # -------------------------------------------------------------------------

    def add_exercise(
        self,
        block_id: str,
        exercise: ExerciseInstance,
        user_id: Optional[str] = None,
    ) -> Workout:
        """Append an exercise instance (with its sets) to a block."""
        workout_id = self._workout_repo.find_workout_id_by_block_id(block_id)
        self._check_owner(workout_id, user_id, "Block", block_id)
        updated = self._workout_repo.add_exercise_to_block(block_id, exercise)
        if updated is None:
            raise AggregateNotFound("Block", block_id)
        return updated

    def remove_exercise(self, exercise_instance_id: str, user_id: Optional[str] = None) -> Workout:
        workout_id = self._workout_repo.find_workout_id_by_exercise_id(exercise_instance_id)
        self._check_owner(workout_id, user_id, "Exercise", exercise_instance_id)
        updated = self._workout_repo.delete_exercise_instance(exercise_instance_id)
        if updated is None:
            raise AggregateNotFound("Exercise", exercise_instance_id)
        return updated

    def reorder_exercises(
        self,
        block_id: str,
        order: Dict[str, int],
        user_id: Optional[str] = None,
    ) -> Workout:
        """Re-sort a block's exercises; order_in_block is rewritten to match."""
        workout_id = self._workout_repo.find_workout_id_by_block_id(block_id)
        workout = self._require_workout(workout_id, user_id, "Block", block_id)
        return self._save(workout.with_exercises_reordered(block_id, order))

    # -------------------------------------------------------------------------
    # Sets
    # -------------------------------------------------------------------------

    def update_set(self, set_id: str, update: SetUpdate, user_id: Optional[str] = None) -> Workout:
        """Apply only the fields explicitly present in ``update``."""
        workout_id = self._workout_repo.find_workout_id_by_set_id(set_id)
        self._check_owner(workout_id, user_id, "Set", set_id)
        updated = self._workout_repo.update_set(set_id, update)
        if updated is None:
            raise AggregateNotFound("Set", set_id)
        return updated

    def complete_set(
        self,
        set_id: str,
        *,
        reps: Optional[int] = None,
        weight: Optional[float] = None,
        rpe: Optional[float] = None,
        user_id: Optional[str] = None,
    ) -> Workout:
        """Record performed reps/weight/rpe on a set."""
        performed = {
            key: value
            for key, value in (("reps", reps), ("weight", weight), ("rpe", rpe))
            if value is not None
        }
        return self.update_set(set_id, SetUpdate(**performed), user_id=user_id)
