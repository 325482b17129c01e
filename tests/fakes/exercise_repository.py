"""
Fake Exercise Repository for testing.

In-memory catalog with seeding and reset helpers. Records lookups so tests
can assert which resolution stage answered.
"""
from typing import List, Optional

from domain.models import Exercise
from infrastructure.db import InMemoryExerciseRepository


class FakeExerciseRepository(InMemoryExerciseRepository):
    """In-memory fake implementation of ExerciseRepository for testing."""

    def __init__(self, exercises: Optional[List[Exercise]] = None):
        super().__init__(exercises)
        self.name_lookups: List[str] = []
        self.slug_lookups: List[str] = []

    def reset(self) -> None:
        self._exercises.clear()
        self.name_lookups.clear()
        self.slug_lookups.clear()

    def seed(self, exercises: List[Exercise]) -> None:
        for exercise in exercises:
            self._exercises[exercise.id] = exercise

    def get_all(self) -> List[Exercise]:
        return list(self._exercises.values())

    def find_by_name(self, name: str) -> Optional[Exercise]:
        self.name_lookups.append(name)
        return super().find_by_name(name)

    def find_by_slug(self, slug: str) -> Optional[Exercise]:
        self.slug_lookups.append(slug)
        return super().find_by_slug(slug)
