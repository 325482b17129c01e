"""
Block entity: an ordered group of exercise instances within a workout.
"""

from typing import Dict, List, Optional

from pydantic import Field

from domain.models.base import CamelModel, new_id
from domain.models.exercise_instance import ExerciseInstance
from domain.models.ordering import reorder_by_id


class Block(CamelModel):
    """
    A section of a workout such as "Warm Up" or "Superset A".

    Examples:
        >>> block = Block(
        ...     label="Superset A",
        ...     exercises=[
        ...         ExerciseInstance(exercise_id="bench-press", order_in_block=0),
        ...         ExerciseInstance(exercise_id="barbell-row", order_in_block=1),
        ...     ],
        ... )
        >>> block.exercise_count
        2
    """

    id: str = Field(default_factory=new_id, description="Unique id within the workout")
    label: Optional[str] = Field(
        default=None, description="Block label (e.g., 'Warm Up', 'Superset A')"
    )
    notes: Optional[str] = Field(default=None, description="Block-level notes")
    exercises: List[ExerciseInstance] = Field(
        default_factory=list, description="Exercise instances in this block"
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)

    @property
    def total_sets(self) -> int:
        return sum(e.set_count for e in self.exercises)

    @property
    def is_superset(self) -> bool:
        """More than one exercise in the block is treated as a superset/circuit."""
        return len(self.exercises) > 1

    def find_exercise(self, exercise_instance_id: str) -> Optional[ExerciseInstance]:
        for exercise in self.exercises:
            if exercise.id == exercise_instance_id:
                return exercise
        return None

    # -------------------------------------------------------------------------
    # Domain Methods (return new instances for immutability)
    # -------------------------------------------------------------------------

    def with_fresh_ids(self) -> "Block":
        """Copy with a new id at every level below and including this block."""
        return self.model_copy(
            update={
                "id": new_id(),
                "exercises": [e.with_fresh_ids() for e in self.exercises],
            }
        )

    def with_exercise_appended(self, exercise: ExerciseInstance) -> "Block":
        return self.model_copy(update={"exercises": [*self.exercises, exercise]})

    def without_exercise(self, exercise_instance_id: str) -> "Block":
        remaining = [e for e in self.exercises if e.id != exercise_instance_id]
        if len(remaining) == len(self.exercises):
            raise ValueError(f"Exercise instance {exercise_instance_id} not in block {self.id}")
        return self.model_copy(update={"exercises": remaining})

    def with_exercises_reordered(self, order: Dict[str, int]) -> "Block":
        """
        Re-sort exercises by the given id -> order mapping.

        ``order_in_block`` is rewritten to each exercise's new position so the
        stored sort key matches the sequence.
        """
        reordered = reorder_by_id(self.exercises, order)
        return self.model_copy(
            update={
                "exercises": [
                    e.model_copy(update={"order_in_block": position})
                    for position, e in enumerate(reordered)
                ]
            }
        )

    def with_exercise_replaced(self, exercise: ExerciseInstance) -> "Block":
        return self.model_copy(
            update={
                "exercises": [exercise if e.id == exercise.id else e for e in self.exercises]
            }
        )

    def __str__(self) -> str:
        label = self.label or "Block"
        return f"{label} ({self.exercise_count} exercises)"
