"""
Converter: resolved WorkoutDraft -> Workout aggregate.

Final pipeline stage. Assigns a freshly generated id to the workout and to
every block, exercise instance and set.
"""

from typing import Optional

from domain.models import Block, ExerciseInstance, SetEntry, Workout, WorkoutDraft
from domain.models.base import utcnow


def draft_to_workout(draft: WorkoutDraft, user_id: Optional[str] = None) -> Workout:
    """
    Convert a fully resolved draft into a new Workout.

    Args:
        draft: Draft whose exercises all carry an exercise_id.
        user_id: Owning user, if known.

    Returns:
        New Workout with fresh ids at every level.

    Raises:
        ValueError: If any exercise in the draft is unresolved.
    """
    if not draft.is_resolved:
        raise ValueError(
            f"Draft has unresolved exercises: {', '.join(draft.unresolved_names)}"
        )

    blocks = [
        Block(
            label=draft_block.label,
            notes=draft_block.notes,
            exercises=[
                ExerciseInstance(
                    exercise_id=draft_exercise.exercise_id,
                    order_in_block=draft_exercise.order_in_block,
                    prescription=draft_exercise.prescription,
                    notes=draft_exercise.notes,
                    sets=[
                        SetEntry(
                            set_number=s.set_number,
                            reps=s.reps,
                            weight=s.weight,
                            weight_unit=s.weight_unit,
                            duration=s.duration,
                            rpe=s.rpe,
                            notes=s.notes,
                        )
                        for s in draft_exercise.sets
                    ],
                )
                for draft_exercise in draft_block.exercises
            ],
        )
        for draft_block in draft.blocks
    ]

    return Workout(
        user_id=user_id,
        name=draft.name,
        date=draft.date,
        notes=draft.notes,
        last_modified_time=utcnow(),
        blocks=blocks,
    )
