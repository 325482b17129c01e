"""
Workout aggregate root.

The Workout is the unit of persistence: blocks, exercise instances and sets
are read and written only as part of it. Every structural domain method
returns a new Workout with ``last_modified_time`` refreshed.
"""

from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from pydantic import Field, field_validator

from domain.models.base import CamelModel, new_id, utcnow
from domain.models.block import Block
from domain.models.exercise_instance import ExerciseInstance
from domain.models.ordering import reorder_by_id
from domain.models.set_entry import SetEntry, SetUpdate


def validate_iso_date(value: str) -> str:
    """Ensure a YYYY-MM-DD calendar date."""
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD") from e
    return value


class Workout(CamelModel):
    """
    Aggregate root representing a complete workout.

    A Workout contains:
    - Identity (id, owning user)
    - Details (name, date, notes)
    - Structure (blocks -> exercise instances -> sets)
    - Recency marker (last_modified_time, informational only)

    Examples:
        >>> workout = Workout(
        ...     name="Push Day",
        ...     date="2025-01-15",
        ...     blocks=[
        ...         Block(
        ...             label="Main",
        ...             exercises=[
        ...                 ExerciseInstance(
        ...                     exercise_id="bench-press",
        ...                     sets=[SetEntry(set_number=1), SetEntry(set_number=2)],
        ...                 )
        ...             ],
        ...         )
        ...     ],
        ... )
        >>> workout.total_sets
        2
    """

    id: str = Field(default_factory=new_id, description="Aggregate id (UUID)")
    user_id: Optional[str] = Field(default=None, description="Owning user")
    name: str = Field(..., min_length=1, max_length=200, description="Workout name")
    date: str = Field(..., description="Calendar date (YYYY-MM-DD)")
    notes: Optional[str] = Field(default=None, description="Workout-level notes")
    last_modified_time: datetime = Field(
        default_factory=utcnow, description="Updated by every mutation"
    )
    blocks: List[Block] = Field(default_factory=list, description="Ordered blocks")

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return validate_iso_date(v)

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    @property
    def total_exercises(self) -> int:
        return sum(b.exercise_count for b in self.blocks)

    @property
    def total_sets(self) -> int:
        return sum(b.total_sets for b in self.blocks)

    @property
    def exercise_ids(self) -> List[str]:
        """Catalog exercise ids referenced by this workout, in order."""
        return [e.exercise_id for b in self.blocks for e in b.exercises]

    def all_ids(self) -> Set[str]:
        """Every entity id in the aggregate (workout, blocks, instances, sets)."""
        ids = {self.id}
        for block in self.blocks:
            ids.add(block.id)
            for exercise in block.exercises:
                ids.add(exercise.id)
                ids.update(s.id for s in exercise.sets)
        return ids

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def find_block(self, block_id: str) -> Optional[Block]:
        for block in self.blocks:
            if block.id == block_id:
                return block
        return None

    def find_exercise(
        self, exercise_instance_id: str
    ) -> Optional[Tuple[Block, ExerciseInstance]]:
        """Locate an exercise instance and the block holding it."""
        for block in self.blocks:
            exercise = block.find_exercise(exercise_instance_id)
            if exercise is not None:
                return block, exercise
        return None

    def find_set(
        self, set_id: str
    ) -> Optional[Tuple[Block, ExerciseInstance, SetEntry]]:
        for block in self.blocks:
            for exercise in block.exercises:
                set_entry = exercise.find_set(set_id)
                if set_entry is not None:
                    return block, exercise, set_entry
        return None

    # -------------------------------------------------------------------------
    # Domain Methods (return new instances for immutability)
    # -------------------------------------------------------------------------

    def touched(self) -> "Workout":
        """Return a copy with last_modified_time set to now."""
        return self.model_copy(update={"last_modified_time": utcnow()})

    def _with_blocks(self, blocks: List[Block]) -> "Workout":
        return self.model_copy(update={"blocks": blocks, "last_modified_time": utcnow()})

    def with_details(
        self,
        name: Optional[str] = None,
        date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> "Workout":
        """Return a copy with the given top-level details replaced."""
        update: Dict[str, object] = {"last_modified_time": utcnow()}
        if name is not None:
            update["name"] = name
        if date is not None:
            update["date"] = validate_iso_date(date)
        if notes is not None:
            update["notes"] = notes
        return self.model_copy(update=update)

    def with_block_added(self, block: Block) -> "Workout":
        """Append a block, assigning fresh ids to it and everything it carries."""
        return self._with_blocks([*self.blocks, block.with_fresh_ids()])

    def without_block(self, block_id: str) -> "Workout":
        remaining = [b for b in self.blocks if b.id != block_id]
        if len(remaining) == len(self.blocks):
            raise ValueError(f"Block {block_id} not in workout {self.id}")
        return self._with_blocks(remaining)

    def with_blocks_reordered(self, order: Dict[str, int]) -> "Workout":
        return self._with_blocks(reorder_by_id(self.blocks, order))

    def with_exercise_added(self, block_id: str, exercise: ExerciseInstance) -> "Workout":
        """Append an exercise (with fresh ids for it and its sets) to a block."""
        block = self.find_block(block_id)
        if block is None:
            raise ValueError(f"Block {block_id} not in workout {self.id}")
        updated = block.with_exercise_appended(exercise.with_fresh_ids())
        return self._with_blocks([updated if b.id == block_id else b for b in self.blocks])

    def without_exercise(self, exercise_instance_id: str) -> "Workout":
        located = self.find_exercise(exercise_instance_id)
        if located is None:
            raise ValueError(f"Exercise instance {exercise_instance_id} not in workout {self.id}")
        owner, _ = located
        updated = owner.without_exercise(exercise_instance_id)
        return self._with_blocks([updated if b.id == owner.id else b for b in self.blocks])

    def with_exercises_reordered(self, block_id: str, order: Dict[str, int]) -> "Workout":
        block = self.find_block(block_id)
        if block is None:
            raise ValueError(f"Block {block_id} not in workout {self.id}")
        updated = block.with_exercises_reordered(order)
        return self._with_blocks([updated if b.id == block_id else b for b in self.blocks])

    def with_set_updated(self, set_id: str, update: SetUpdate) -> "Workout":
        """Apply a partial update to one set."""
        located = self.find_set(set_id)
        if located is None:
            raise ValueError(f"Set {set_id} not in workout {self.id}")
        block, exercise, set_entry = located
        new_exercise = exercise.model_copy(
            update={
                "sets": [
                    set_entry.with_update(update) if s.id == set_id else s
                    for s in exercise.sets
                ]
            }
        )
        new_block = block.with_exercise_replaced(new_exercise)
        return self._with_blocks([new_block if b.id == block.id else b for b in self.blocks])

    def duplicate(self, date: Optional[str] = None) -> "Workout":
        """
        Deep-clone into an independent aggregate.

        Every node at every level gets a fresh id; exercise_id references are
        kept. The date defaults to this workout's date.
        """
        return self.model_copy(
            update={
                "id": new_id(),
                "date": validate_iso_date(date) if date is not None else self.date,
                "last_modified_time": utcnow(),
                "blocks": [b.with_fresh_ids() for b in self.blocks],
            }
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.date}, {self.block_count} blocks, {self.total_sets} sets)"
