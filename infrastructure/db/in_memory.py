"""
In-memory repository implementations.

Used when ``storage_backend`` is "memory" (local runs, the CLI without a
database) and as the base of the test fakes. Aggregates are deep-copied on the
way in and out so callers never share state with the store.
"""
import logging
import pathlib
import threading
from typing import Dict, List, Optional

import yaml

from application.exceptions import PersistenceError
from application.ports import ExerciseFilters, WorkoutPage
from domain.models import Exercise, Workout
from infrastructure.db.aggregate_mutations import WorkoutAggregateMutations

logger = logging.getLogger(__name__)

ROOT = pathlib.Path(__file__).resolve().parents[2]
SEED_CATALOG_PATH = ROOT / "shared/catalog/exercises.yaml"


def load_exercise_catalog(path: pathlib.Path = SEED_CATALOG_PATH) -> List[Exercise]:
    """Load catalog exercises from a YAML file with a top-level ``exercises`` list."""
    data = yaml.safe_load(path.read_text()) or {}
    exercises = [Exercise.model_validate(item) for item in data.get("exercises", [])]
    logger.info(f"Loaded {len(exercises)} catalog exercises from {path.name}")
    return exercises


class InMemoryWorkoutRepository(WorkoutAggregateMutations):
    """Dict-backed WorkoutRepository keyed by workout id."""

    def __init__(self):
        self._workouts: Dict[str, Workout] = {}
        self._lock = threading.Lock()

    def create(self, workout: Workout) -> Workout:
        with self._lock:
            if workout.id in self._workouts:
                raise PersistenceError(f"Workout already exists: {workout.id}")
            self._workouts[workout.id] = workout.model_copy(deep=True)
        logger.info(f"Workout {workout.id} created for user {workout.user_id}")
        return workout.model_copy(deep=True)

    def find_by_id(self, workout_id: str, user_id: Optional[str] = None) -> Optional[Workout]:
        workout = self._workouts.get(workout_id)
        if workout is None:
            return None
        if user_id is not None and workout.user_id != user_id:
            return None
        return workout.model_copy(deep=True)

    def update(self, workout: Workout) -> Optional[Workout]:
        with self._lock:
            if workout.id not in self._workouts:
                return None
            self._workouts[workout.id] = workout.model_copy(deep=True)
        return workout.model_copy(deep=True)

    def delete(self, workout_id: str, user_id: Optional[str] = None) -> bool:
        with self._lock:
            workout = self._workouts.get(workout_id)
            if workout is None or (user_id is not None and workout.user_id != user_id):
                return False
            del self._workouts[workout_id]
        logger.info(f"Workout {workout_id} deleted")
        return True

    def find_by_user_id(
        self,
        user_id: str,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> WorkoutPage:
        # ISO dates compare correctly as strings
        matching = [
            w for w in self._workouts.values()
            if w.user_id == user_id
            and (date_from is None or w.date >= date_from)
            and (date_to is None or w.date <= date_to)
        ]
        matching.sort(key=lambda w: (w.date, w.last_modified_time), reverse=True)
        page = matching[offset:offset + limit]
        return WorkoutPage(workouts=[w.model_copy(deep=True) for w in page], total=len(matching))

    def find_workout_id_by_block_id(self, block_id: str) -> Optional[str]:
        for workout in self._workouts.values():
            if workout.find_block(block_id) is not None:
                return workout.id
        return None

    def find_workout_id_by_exercise_id(self, exercise_instance_id: str) -> Optional[str]:
        for workout in self._workouts.values():
            if workout.find_exercise(exercise_instance_id) is not None:
                return workout.id
        return None

    def find_workout_id_by_set_id(self, set_id: str) -> Optional[str]:
        for workout in self._workouts.values():
            if workout.find_set(set_id) is not None:
                return workout.id
        return None


class InMemoryExerciseRepository:
    """Dict-backed ExerciseRepository keyed by exercise id."""

    def __init__(self, exercises: Optional[List[Exercise]] = None):
        self._exercises: Dict[str, Exercise] = {}
        for exercise in exercises or []:
            self._exercises[exercise.id] = exercise

    def find_by_id(self, exercise_id: str) -> Optional[Exercise]:
        return self._exercises.get(exercise_id)

    def find_by_slug(self, slug: str) -> Optional[Exercise]:
        for exercise in self._exercises.values():
            if exercise.slug == slug:
                return exercise
        return None

    def find_by_name(self, name: str) -> Optional[Exercise]:
        lowered = name.strip().lower()
        for exercise in self._exercises.values():
            if exercise.name.lower() == lowered:
                return exercise
        for exercise in self._exercises.values():
            if any(alias.lower() == lowered for alias in exercise.aliases):
                return exercise
        return None

    def find_all(self, filters: Optional[ExerciseFilters] = None) -> List[Exercise]:
        filters = filters or ExerciseFilters()
        exercises = sorted(self._exercises.values(), key=lambda e: e.name.lower())
        if filters.search:
            needle = filters.search.lower()
            exercises = [e for e in exercises if needle in e.name.lower()]
        if filters.category:
            exercises = [e for e in exercises if e.category == filters.category]
        if filters.equipment:
            exercises = [e for e in exercises if filters.equipment in e.equipment]
        return exercises[filters.offset:filters.offset + filters.limit]

    def create(self, exercise: Exercise) -> Exercise:
        if exercise.id in self._exercises:
            raise PersistenceError(f"Exercise already exists: {exercise.id}")
        self._exercises[exercise.id] = exercise
        return exercise

    def update(self, exercise: Exercise) -> Optional[Exercise]:
        if exercise.id not in self._exercises:
            return None
        self._exercises[exercise.id] = exercise
        return exercise

    def delete(self, exercise_id: str) -> bool:
        return self._exercises.pop(exercise_id, None) is not None

    def check_duplicate_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        lowered = name.strip().lower()
        return any(
            e.name.lower() == lowered and e.id != exclude_id
            for e in self._exercises.values()
        )
