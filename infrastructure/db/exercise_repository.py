"""
Supabase implementation of ExerciseRepository.

This module provides the concrete Supabase implementation for querying and
maintaining the canonical ``exercises`` table.

Database schema (exercises table):
- id: UUID
- name: Display name (unique, case-insensitive)
- slug: URL-safe unique slug
- category: e.g. "chest"
- equipment / primary_muscles / aliases / tags: TEXT[]
"""
import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from application.exceptions import PersistenceError
from application.ports import ExerciseFilters
from domain.models import Exercise

logger = logging.getLogger(__name__)

TABLE = "exercises"


def _row_to_exercise(row: Dict[str, Any]) -> Exercise:
    return Exercise(
        id=row["id"],
        name=row["name"],
        slug=row["slug"],
        category=row.get("category"),
        equipment=row.get("equipment") or [],
        primary_muscles=row.get("primary_muscles") or [],
        aliases=row.get("aliases") or [],
        tags=row.get("tags") or [],
    )


def _exercise_to_row(exercise: Exercise) -> Dict[str, Any]:
    return exercise.model_dump(mode="json")


class SupabaseExerciseRepository:
    """
    Supabase implementation of ExerciseRepository protocol.

    Provides methods to query the canonical exercises table for:
    - Id and slug lookup
    - Exact name / alias matching
    - Filtered listing
    - Catalog maintenance
    """

    def __init__(self, client: Client):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected, not global)
        """
        self._client = client

    def _find_one(self, column: str, value: str) -> Optional[Exercise]:
        try:
            result = self._client.table(TABLE).select("*").eq(column, value).limit(1).execute()
        except Exception:
            logger.exception(f"Error fetching exercise by {column} {value}")
            return None
        if not result.data:
            return None
        return _row_to_exercise(result.data[0])

    def find_by_id(self, exercise_id: str) -> Optional[Exercise]:
        return self._find_one("id", exercise_id)

    def find_by_slug(self, slug: str) -> Optional[Exercise]:
        return self._find_one("slug", slug)

    def find_by_name(self, name: str) -> Optional[Exercise]:
        """
        Find an exercise by exact name or alias (case-insensitive).

        Names go through ``ilike`` without wildcards. Aliases are matched as
        written and in lower case.
        """
        try:
            result = self._client.table(TABLE).select("*").ilike("name", name).limit(1).execute()
            if result.data:
                return _row_to_exercise(result.data[0])
            for alias in dict.fromkeys([name, name.lower()]):
                result = self._client.table(TABLE).select("*").contains("aliases", [alias]).limit(1).execute()
                if result.data:
                    return _row_to_exercise(result.data[0])
        except Exception:
            logger.exception(f"Error finding exercise by name {name}")
        return None

    def find_all(self, filters: Optional[ExerciseFilters] = None) -> List[Exercise]:
        filters = filters or ExerciseFilters()
        try:
            query = self._client.table(TABLE).select("*")
            if filters.search:
                query = query.ilike("name", f"%{filters.search}%")
            if filters.category:
                query = query.eq("category", filters.category)
            if filters.equipment:
                query = query.contains("equipment", [filters.equipment])
            query = query.order("name").range(filters.offset, filters.offset + filters.limit - 1)
            result = query.execute()
        except Exception:
            logger.exception("Error fetching exercises")
            return []
        return [_row_to_exercise(row) for row in result.data or []]

    def create(self, exercise: Exercise) -> Exercise:
        try:
            result = self._client.table(TABLE).insert(_exercise_to_row(exercise)).execute()
        except Exception as e:
            logger.error(f"Failed to create exercise {exercise.name}: {e}")
            raise PersistenceError(f"Failed to create exercise: {e}") from e
        if not result.data:
            raise PersistenceError(f"Failed to create exercise {exercise.name}")
        logger.info(f"Exercise created: {exercise.name} ({exercise.id})")
        return _row_to_exercise(result.data[0])

    def update(self, exercise: Exercise) -> Optional[Exercise]:
        row = _exercise_to_row(exercise)
        row.pop("id")
        try:
            result = self._client.table(TABLE).update(row).eq("id", exercise.id).execute()
        except Exception as e:
            logger.error(f"Failed to update exercise {exercise.id}: {e}")
            raise PersistenceError(f"Failed to update exercise: {e}") from e
        if not result.data:
            return None
        return _row_to_exercise(result.data[0])

    def delete(self, exercise_id: str) -> bool:
        try:
            result = self._client.table(TABLE).delete().eq("id", exercise_id).execute()
        except Exception as e:
            logger.error(f"Failed to delete exercise {exercise_id}: {e}")
            raise PersistenceError(f"Failed to delete exercise: {e}") from e
        return bool(result.data)

    def check_duplicate_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        try:
            query = self._client.table(TABLE).select("id").ilike("name", name)
            if exclude_id:
                query = query.neq("id", exclude_id)
            result = query.limit(1).execute()
        except Exception:
            logger.exception(f"Error checking duplicate exercise name {name}")
            return False
        return bool(result.data)
