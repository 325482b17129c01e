"""
Set entity: one performed (or to-be-performed) set of an exercise instance.

reps/weight/duration/rpe are nullable on purpose: null means "not yet performed,
to be filled in by the user". They are never coerced to zero.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field, computed_field

from domain.models.base import CamelModel, new_id


class WeightUnit(str, Enum):
    """Unit for the weight of a set."""

    LBS = "lbs"
    KG = "kg"


class SetEntry(CamelModel):
    """
    A single set within an exercise instance.

    Examples:
        >>> SetEntry(set_number=1, reps=10, weight=135).is_completed
        True
        >>> SetEntry(set_number=2).is_completed
        False
    """

    id: str = Field(default_factory=new_id, description="Unique id within the workout")
    set_number: int = Field(..., ge=1, description="1-indexed set number")
    reps: Optional[int] = Field(default=None, ge=0, description="Repetitions performed")
    weight: Optional[float] = Field(default=None, ge=0, description="Load lifted")
    weight_unit: WeightUnit = Field(default=WeightUnit.LBS, description="Unit for weight")
    duration: Optional[int] = Field(
        default=None, ge=0, description="Duration in seconds for timed sets"
    )
    rpe: Optional[float] = Field(
        default=None, ge=1, le=10, description="Rate of perceived exertion (1-10)"
    )
    notes: Optional[str] = Field(default=None, description="Set-specific notes")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_completed(self) -> bool:
        """A set counts as completed once any performance value is recorded."""
        return self.reps is not None or self.weight is not None or self.duration is not None

    def with_fresh_id(self) -> "SetEntry":
        return self.model_copy(update={"id": new_id()})

    def with_update(self, update: "SetUpdate") -> "SetEntry":
        """
        Return a new SetEntry with only the explicitly provided fields applied.

        Fields absent from the update keep their prior values; fields explicitly
        set to None are cleared.
        """
        return self.model_copy(update=update.changes())


class SetUpdate(CamelModel):
    """
    Partial update for a set.

    Only fields present in the input are applied. Presence is tracked through
    pydantic's ``model_fields_set`` so an explicit null differs from "absent".
    """

    reps: Optional[int] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    weight_unit: Optional[WeightUnit] = None
    duration: Optional[int] = Field(default=None, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly provided by the caller, keyed by attribute name."""
        changes = self.model_dump(exclude_unset=True)
        # weightUnit is not nullable on the set itself
        if changes.get("weight_unit") is None:
            changes.pop("weight_unit", None)
        return changes

    @property
    def is_empty(self) -> bool:
        return not self.changes()
