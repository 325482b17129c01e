"""
Fake Workout Repository for testing.

In-memory WorkoutRepository with seeding and reset helpers for fast,
isolated tests without database dependencies.
"""
from typing import List, Optional

from domain.models import Workout
from infrastructure.db import InMemoryWorkoutRepository


class FakeWorkoutRepository(InMemoryWorkoutRepository):
    """
    In-memory fake implementation of WorkoutRepository for testing.

    Counts writes so tests can assert that a failed operation never wrote.

    Usage:
        repo = FakeWorkoutRepository()
        repo.seed([make_workout(user_id="user1")])
    """

    def __init__(self):
        super().__init__()
        self.update_calls = 0
        self.create_calls = 0

    def reset(self) -> None:
        """Clear all stored workouts."""
        self._workouts.clear()
        self.update_calls = 0
        self.create_calls = 0

    def seed(self, workouts: List[Workout]) -> None:
        """Store workouts as-is (ids kept)."""
        for workout in workouts:
            self._workouts[workout.id] = workout.model_copy(deep=True)

    def get_all(self) -> List[Workout]:
        """Get all stored workouts (test helper)."""
        return [w.model_copy(deep=True) for w in self._workouts.values()]

    def create(self, workout: Workout) -> Workout:
        self.create_calls += 1
        return super().create(workout)

    def update(self, workout: Workout) -> Optional[Workout]:
        self.update_calls += 1
        return super().update(workout)
