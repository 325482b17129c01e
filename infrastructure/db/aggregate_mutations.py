"""
Structural sub-operations shared by every WorkoutRepository backend.

Each operation resolves the owning workout from a nested id, applies the
matching Workout domain method in memory, and writes the whole aggregate back
through ``update``. Backends only provide ``find_by_id``, ``update`` and the
``find_workout_id_by_*`` lookups; nothing here knows which storage is in use.

The read and the write are not one transaction. Concurrent writers on the same
workout resolve as last write wins.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from domain.models import Block, ExerciseInstance, SetUpdate, Workout

logger = logging.getLogger(__name__)


class WorkoutAggregateMutations(ABC):
    """Mixin implementing the structural sub-operations of WorkoutRepository."""

    @abstractmethod
    def find_by_id(self, workout_id: str, user_id: Optional[str] = None) -> Optional[Workout]:
        raise NotImplementedError

    @abstractmethod
    def update(self, workout: Workout) -> Optional[Workout]:
        raise NotImplementedError

    @abstractmethod
    def find_workout_id_by_block_id(self, block_id: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def find_workout_id_by_exercise_id(self, exercise_instance_id: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def find_workout_id_by_set_id(self, set_id: str) -> Optional[str]:
        raise NotImplementedError

    def _mutate(
        self,
        workout_id: Optional[str],
        mutation: Callable[[Workout], Workout],
    ) -> Optional[Workout]:
        """Read the aggregate, apply ``mutation`` and write it back."""
        if workout_id is None:
            return None
        workout = self.find_by_id(workout_id)
        if workout is None:
            return None
        try:
            updated = mutation(workout)
        except ValueError as e:
            # Nested entity vanished between the id lookup and the read
            logger.warning(f"Mutation of workout {workout_id} skipped: {e}")
            return None
        return self.update(updated)

    def add_block(self, workout_id: str, block: Block) -> Optional[Workout]:
        return self._mutate(workout_id, lambda w: w.with_block_added(block))

    def delete_block(self, block_id: str) -> Optional[Workout]:
        return self._mutate(
            self.find_workout_id_by_block_id(block_id),
            lambda w: w.without_block(block_id),
        )

    def add_exercise_to_block(self, block_id: str, exercise: ExerciseInstance) -> Optional[Workout]:
        return self._mutate(
            self.find_workout_id_by_block_id(block_id),
            lambda w: w.with_exercise_added(block_id, exercise),
        )

    def delete_exercise_instance(self, exercise_instance_id: str) -> Optional[Workout]:
        return self._mutate(
            self.find_workout_id_by_exercise_id(exercise_instance_id),
            lambda w: w.without_exercise(exercise_instance_id),
        )

    def update_set(self, set_id: str, update: SetUpdate) -> Optional[Workout]:
        return self._mutate(
            self.find_workout_id_by_set_id(set_id),
            lambda w: w.with_set_updated(set_id, update),
        )
