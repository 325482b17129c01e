"""
Fake Implementations for Testing.

This package provides in-memory fake implementations of the repository, cache
and LLM gateway interfaces for fast, isolated testing. No database, cache
server or model provider required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Factory functions for common test scenarios

Usage:
    from tests.fakes import FakeLLMGateway, create_workout_repo, make_workout

    gateway = FakeLLMGateway().queue({"isWorkout": True, "confidence": 0.9})
    repo = create_workout_repo(user_id="user1", num_workouts=3)
"""
from typing import Any, Dict, List, Optional

from domain.models import Block, Exercise, ExerciseInstance, SetEntry, Workout

from tests.fakes.llm_gateway import FakeCall, FakeLLMGateway
from tests.fakes.workout_repository import FakeWorkoutRepository
from tests.fakes.exercise_repository import FakeExerciseRepository
from tests.fakes.exercise_name_cache import FakeExerciseNameCache


BENCH_PRESS_ID = "ex-bench-press"
SQUAT_ID = "ex-back-squat"
PULL_UP_ID = "ex-pull-up"
DUMBBELL_ROW_ID = "ex-dumbbell-row"


# =============================================================================
# Factory Functions
# =============================================================================


def make_catalog() -> List[Exercise]:
    """A small exercise catalog used across tests."""
    return [
        Exercise(
            id=BENCH_PRESS_ID,
            name="Barbell Bench Press",
            slug="barbell-bench-press",
            category="chest",
            equipment=["barbell"],
            aliases=["Bench Press", "Flat Bench"],
        ),
        Exercise(
            id=SQUAT_ID,
            name="Barbell Back Squat",
            slug="barbell-back-squat",
            category="legs",
            equipment=["barbell"],
            aliases=["Back Squat"],
        ),
        Exercise(
            id=PULL_UP_ID,
            name="Pull-Up",
            slug="pull-up",
            category="back",
            equipment=["pull-up bar"],
            aliases=["Pullup"],
        ),
        Exercise(
            id=DUMBBELL_ROW_ID,
            name="Dumbbell Row",
            slug="dumbbell-row",
            category="back",
            equipment=["dumbbell"],
            aliases=["DB Row"],
        ),
    ]


def create_exercise_repo() -> FakeExerciseRepository:
    return FakeExerciseRepository(make_catalog())


def make_sets(count: int, **fields: Any) -> List[SetEntry]:
    return [SetEntry(set_number=i + 1, **fields) for i in range(count)]


def make_exercise(
    exercise_id: str = BENCH_PRESS_ID,
    *,
    order: int = 0,
    num_sets: int = 3,
    **set_fields: Any,
) -> ExerciseInstance:
    return ExerciseInstance(
        exercise_id=exercise_id,
        order_in_block=order,
        sets=make_sets(num_sets, **set_fields),
    )


def make_block(*exercises: ExerciseInstance, label: Optional[str] = None) -> Block:
    return Block(label=label, exercises=list(exercises) or [make_exercise()])


def make_workout(
    *,
    user_id: str = "test_user",
    name: str = "Test Workout",
    date: str = "2025-01-15",
    blocks: Optional[List[Block]] = None,
) -> Workout:
    """
    Build a workout with two blocks by default:
    bench press (3 sets) and a pull-up / dumbbell row superset (3 sets each).
    """
    if blocks is None:
        blocks = [
            make_block(make_exercise(BENCH_PRESS_ID, reps=10, weight=135), label="Strength"),
            make_block(
                make_exercise(PULL_UP_ID, order=0),
                make_exercise(DUMBBELL_ROW_ID, order=1),
                label="Superset",
            ),
        ]
    return Workout(user_id=user_id, name=name, date=date, blocks=blocks)


def create_workout_repo(
    *,
    user_id: str = "test_user",
    num_workouts: int = 0,
) -> FakeWorkoutRepository:
    """
    Create a FakeWorkoutRepository with optional pre-populated workouts.

    Workouts are dated on consecutive days starting 2025-01-01.
    """
    repo = FakeWorkoutRepository()
    repo.seed([
        make_workout(user_id=user_id, name=f"Test Workout {i + 1}", date=f"2025-01-{i + 1:02d}")
        for i in range(num_workouts)
    ])
    return repo


def draft_payload(
    exercises: Optional[List[Dict[str, Any]]] = None,
    *,
    name: str = "Bench Day",
    date: str = "2025-01-15",
) -> Dict[str, Any]:
    """A camelCase draft payload in the shape the extraction model returns."""
    if exercises is None:
        exercises = [draft_exercise("Bench Press", num_sets=3, reps=10, weight=135)]
    return {
        "name": name,
        "date": date,
        "blocks": [{"label": None, "notes": None, "exercises": exercises}],
    }


def draft_exercise(
    name: Optional[str] = None,
    *,
    exercise_id: Optional[str] = None,
    order: int = 0,
    num_sets: int = 3,
    reps: Optional[int] = None,
    weight: Optional[float] = None,
    prescription: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "exerciseId": exercise_id,
        "exerciseName": name,
        "orderInBlock": order,
        "prescription": prescription,
        "notes": None,
        "sets": [
            {
                "setNumber": i + 1,
                "reps": reps,
                "weight": weight,
                "weightUnit": "lbs",
                "duration": None,
                "rpe": None,
                "notes": None,
            }
            for i in range(num_sets)
        ],
    }


__all__ = [
    # Fakes
    "FakeLLMGateway",
    "FakeCall",
    "FakeWorkoutRepository",
    "FakeExerciseRepository",
    "FakeExerciseNameCache",
    # Factories
    "make_catalog",
    "create_exercise_repo",
    "make_sets",
    "make_exercise",
    "make_block",
    "make_workout",
    "create_workout_repo",
    "draft_payload",
    "draft_exercise",
    # Catalog ids
    "BENCH_PRESS_ID",
    "SQUAT_ID",
    "PULL_UP_ID",
    "DUMBBELL_ROW_ID",
]
