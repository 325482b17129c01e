"""
ExerciseInstance entity: one occurrence of a catalog exercise inside a block.
"""

from typing import List, Optional

from pydantic import Field

from domain.models.base import CamelModel, new_id
from domain.models.set_entry import SetEntry


class ExerciseInstance(CamelModel):
    """
    A catalog exercise as prescribed within a block.

    ``exercise_id`` references the independent Exercise catalog entity and is
    never owned by the workout. ``order_in_block`` is a sort key, not a dense
    index.
    """

    id: str = Field(default_factory=new_id, description="Unique id within the workout")
    exercise_id: str = Field(..., min_length=1, description="Catalog exercise id")
    order_in_block: int = Field(default=0, ge=0, description="Sort key within the block")
    sets: List[SetEntry] = Field(default_factory=list, description="Ordered sets")
    prescription: Optional[str] = Field(
        default=None, description="Readable prescription, e.g. '3 x 8-10 (Rest 2 min)'"
    )
    notes: Optional[str] = Field(default=None, description="Exercise-level notes")

    @property
    def set_count(self) -> int:
        return len(self.sets)

    @property
    def completed_set_count(self) -> int:
        return sum(1 for s in self.sets if s.is_completed)

    def find_set(self, set_id: str) -> Optional[SetEntry]:
        for set_entry in self.sets:
            if set_entry.id == set_id:
                return set_entry
        return None

    def with_fresh_ids(self) -> "ExerciseInstance":
        """Copy with a new id for the instance and for each of its sets."""
        return self.model_copy(
            update={
                "id": new_id(),
                "sets": [s.with_fresh_id() for s in self.sets],
            }
        )
