"""
Manage Workout Use Case.

Create, read, update, delete, list and duplicate whole Workout aggregates.
Missing workouts raise AggregateNotFound; a write that does not land raises
PersistenceError.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from application.exceptions import AggregateNotFound, InvalidInput, PersistenceError
from application.ports import ExerciseRepository, WorkoutRepository
from domain.models import Block, Workout
from domain.models.base import describe_validation_error
from domain.models.workout import validate_iso_date

logger = logging.getLogger(__name__)

UNKNOWN_EXERCISE_NAME = "Unknown Exercise"
DATE_RANGE_PAGE_SIZE = 100


@dataclass
class WorkoutListResult:
    """One page of a user's workouts."""
    workouts: List[Workout] = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workouts": [w.to_json_dict() for w in self.workouts],
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "pages": self.pages,
            },
        }


def build_workout_view(workout: Workout, exercise_repo: ExerciseRepository) -> Dict[str, Any]:
    """
    Serialize a workout for display, adding ``exerciseName`` to every exercise.

    Catalog ids that no longer resolve are shown as "Unknown Exercise".
    """
    names: Dict[str, str] = {}
    for exercise_id in set(workout.exercise_ids):
        exercise = exercise_repo.find_by_id(exercise_id)
        names[exercise_id] = exercise.name if exercise else UNKNOWN_EXERCISE_NAME

    view = workout.to_json_dict()
    for block in view["blocks"]:
        for exercise in block["exercises"]:
            exercise["exerciseName"] = names.get(exercise["exerciseId"], UNKNOWN_EXERCISE_NAME)
    return view


class ManageWorkoutUseCase:
    """
    Use case for whole-aggregate workout operations.

    Usage:
        use_case = ManageWorkoutUseCase(workout_repo, exercise_repo)
        workout = use_case.duplicate("w-123", user_id="user-1", date="2025-02-01")
    """

    def __init__(
        self,
        workout_repo: WorkoutRepository,
        exercise_repo: Optional[ExerciseRepository] = None,
    ):
        """
        Initialize with required dependencies.

        Args:
            workout_repo: Repository for workout persistence
            exercise_repo: Catalog, used to resolve display names
        """
        self._workout_repo = workout_repo
        self._exercise_repo = exercise_repo

    def _require(self, workout_id: str, user_id: Optional[str] = None) -> Workout:
        workout = self._workout_repo.find_by_id(workout_id, user_id)
        if workout is None:
            raise AggregateNotFound("Workout", workout_id)
        return workout

    def _save(self, workout: Workout) -> Workout:
        saved = self._workout_repo.update(workout)
        if saved is None:
            raise PersistenceError(f"Workout not found after update: {workout.id}")
        return saved

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create(
        self,
        user_id: str,
        name: str,
        date: str,
        notes: Optional[str] = None,
        blocks: Optional[List[Block]] = None,
    ) -> Workout:
        """Create a workout; every block, exercise and set gets a fresh id."""
        try:
            workout = Workout(
                user_id=user_id,
                name=name,
                date=date,
                notes=notes,
                blocks=[b.with_fresh_ids() for b in blocks or []],
            )
        except ValidationError as e:
            raise InvalidInput("; ".join(describe_validation_error(e))) from e
        return self._workout_repo.create(workout)

    def get(self, workout_id: str, user_id: Optional[str] = None) -> Workout:
        return self._require(workout_id, user_id)

    def get_view(self, workout_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        """Get a workout serialized with resolved exercise names."""
        workout = self._require(workout_id, user_id)
        if self._exercise_repo is None:
            return workout.to_json_dict()
        return build_workout_view(workout, self._exercise_repo)

    def update_details(
        self,
        workout_id: str,
        *,
        name: Optional[str] = None,
        date: Optional[str] = None,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Workout:
        """Replace name, date or notes; untouched fields keep their values."""
        if name is not None and not name.strip():
            raise InvalidInput("Workout name cannot be empty")
        workout = self._require(workout_id, user_id)
        try:
            updated = workout.with_details(name=name, date=date, notes=notes)
        except ValueError as e:
            raise InvalidInput(str(e)) from e
        return self._save(updated)

    def delete(self, workout_id: str, user_id: Optional[str] = None) -> None:
        if not self._workout_repo.delete(workout_id, user_id):
            raise AggregateNotFound("Workout", workout_id)
        logger.info(f"Workout {workout_id} deleted")

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_workouts(
        self,
        user_id: str,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> WorkoutListResult:
        """
        List a user's workouts, newest first.

        Args:
            user_id: Owning user
            date_from: Inclusive lower date bound (YYYY-MM-DD)
            date_to: Inclusive upper date bound (YYYY-MM-DD)
            page: 1-based page number
            limit: Page size

        Returns:
            WorkoutListResult with the page and pagination totals
        """
        if page < 1 or limit < 1:
            raise InvalidInput("page and limit must be positive")
        self._check_dates(date_from, date_to)
        result = self._workout_repo.find_by_user_id(
            user_id,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return WorkoutListResult(
            workouts=result.workouts,
            page=page,
            limit=limit,
            total=result.total,
        )

    def list_by_date_range(self, user_id: str, start_date: str, end_date: str) -> List[Workout]:
        """Every workout of a user dated within [start_date, end_date]."""
        self._check_dates(start_date, end_date)
        workouts: List[Workout] = []
        offset = 0
        while True:
            result = self._workout_repo.find_by_user_id(
                user_id,
                date_from=start_date,
                date_to=end_date,
                limit=DATE_RANGE_PAGE_SIZE,
                offset=offset,
            )
            workouts.extend(result.workouts)
            offset += DATE_RANGE_PAGE_SIZE
            if not result.workouts or offset >= result.total:
                return workouts

    @staticmethod
    def _check_dates(*dates: Optional[str]) -> None:
        for value in dates:
            if value is None:
                continue
            try:
                validate_iso_date(value)
            except ValueError as e:
                raise InvalidInput(str(e)) from e

    # -------------------------------------------------------------------------
    # Duplicate
    # -------------------------------------------------------------------------

    def duplicate(
        self,
        workout_id: str,
        user_id: str,
        date: Optional[str] = None,
    ) -> Workout:
        """
        Copy a workout into a new independent aggregate owned by ``user_id``.

        Every block, exercise instance and set gets a fresh id; exercise
        references are kept. The date defaults to the source workout's date.
        """
        source = self._require(workout_id)
        try:
            copy = source.duplicate(date=date)
        except ValueError as e:
            raise InvalidInput(str(e)) from e
        copy = copy.model_copy(update={"user_id": user_id})
        created = self._workout_repo.create(copy)
        logger.info(f"Workout {workout_id} duplicated as {created.id}")
        return created
