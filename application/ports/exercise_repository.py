"""
Exercise Repository Interface (Port).

This module defines the abstract interface for the canonical exercise catalog.
Implementations may use Supabase, in-memory storage, or other backends.
"""
from dataclasses import dataclass
from typing import List, Optional, Protocol

from domain.models import Exercise


@dataclass
class ExerciseFilters:
    """Optional filters for listing catalog exercises."""
    search: Optional[str] = None
    category: Optional[str] = None
    equipment: Optional[str] = None
    limit: int = 100
    offset: int = 0


class ExerciseRepository(Protocol):
    """
    Abstract interface for the exercise catalog.

    Used by the exercise name resolver and by response building to turn
    catalog ids back into display names.
    """

    def find_by_id(self, exercise_id: str) -> Optional[Exercise]:
        """
        Get an exercise by its catalog id.

        Returns:
            Exercise or None if not found
        """
        ...

    def find_by_slug(self, slug: str) -> Optional[Exercise]:
        """
        Get an exercise by its slug (e.g., "barbell-bench-press").

        Returns:
            Exercise or None if not found
        """
        ...

    def find_by_name(self, name: str) -> Optional[Exercise]:
        """
        Find an exercise whose name or alias matches exactly (case-insensitive).

        Returns:
            Exercise or None if not found
        """
        ...

    def find_all(self, filters: Optional[ExerciseFilters] = None) -> List[Exercise]:
        """
        List exercises matching the filters.

        Args:
            filters: Optional search/category/equipment filters and paging

        Returns:
            List of exercises ordered by name
        """
        ...

    def create(self, exercise: Exercise) -> Exercise:
        """Add an exercise to the catalog."""
        ...

    def update(self, exercise: Exercise) -> Optional[Exercise]:
        """Replace a catalog exercise. Returns None if it does not exist."""
        ...

    def delete(self, exercise_id: str) -> bool:
        """Remove a catalog exercise. Returns True if one was removed."""
        ...

    def check_duplicate_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        """
        Check whether another exercise already uses ``name`` (case-insensitive).

        Args:
            name: Candidate name
            exclude_id: Exercise id to ignore (for renames)

        Returns:
            True if the name is taken
        """
        ...
