"""
Pipeline collaborator interfaces (Ports).

The draft producer and the exercise name resolver sit between the workout
content gate and the semantic repair loop. Both are replaceable.
"""
from typing import Optional, Protocol

from domain.models import WeightUnit, WorkoutDraft


class DraftProducer(Protocol):
    """Produces the first structured draft from sanitized workout text."""

    def produce(
        self,
        text: str,
        *,
        date: str,
        weight_unit: WeightUnit = WeightUnit.LBS,
    ) -> WorkoutDraft:
        """
        Extract a draft whose exercises carry free-text ``exercise_name``.

        Args:
            text: Sanitized workout text
            date: Workout date (YYYY-MM-DD)
            weight_unit: Unit to assign to every set

        Returns:
            WorkoutDraft (exercise ids may be unresolved)
        """
        ...


class ExerciseNameResolver(Protocol):
    """Maps free-text exercise names in a draft to catalog exercise ids."""

    def resolve(self, draft: WorkoutDraft, user_id: Optional[str] = None) -> WorkoutDraft:
        """
        Fill ``exercise_id`` for every unresolved exercise in the draft.

        Exercises that already carry an ``exercise_id`` are left unchanged.

        Raises:
            ExerciseResolutionError: If a name cannot be mapped
        """
        ...
