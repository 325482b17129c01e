"""
Supabase implementation of WorkoutRepository.

The Workout aggregate is stored whole in the ``workouts`` table: filterable
columns are broken out and the nested blocks live in the ``workout_data`` JSONB
column (see domain.converters.db_converters). Nested ids are resolved with
JSONB containment queries on that column.
"""
import logging
from typing import Any, Dict, Optional

from supabase import Client

from application.exceptions import PersistenceError
from application.ports import WorkoutPage
from domain.converters import db_row_to_workout, workout_to_db_row
from domain.models import Workout
from infrastructure.db.aggregate_mutations import WorkoutAggregateMutations

logger = logging.getLogger(__name__)

TABLE = "workouts"


def _log_rls_hint(error: Exception) -> None:
    error_msg = str(error)
    if "PGRST" in error_msg or "permission" in error_msg.lower() or "row-level security" in error_msg.lower():
        logger.error("RLS/Permissions error: Consider using SUPABASE_SERVICE_ROLE_KEY instead of SUPABASE_ANON_KEY for backend API")


class SupabaseWorkoutRepository(WorkoutAggregateMutations):
    """
    Supabase implementation of WorkoutRepository protocol.

    All Supabase query logic for workouts is encapsulated here.
    The client is injected via constructor for testability.
    """

    def __init__(self, client: Client):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected, not global)
        """
        self._client = client

    # -------------------------------------------------------------------------
    # Aggregate CRUD
    # -------------------------------------------------------------------------

    def create(self, workout: Workout) -> Workout:
        try:
            result = self._client.table(TABLE).insert(workout_to_db_row(workout)).execute()
        except Exception as e:
            logger.error(f"Failed to create workout {workout.id}: {e}")
            _log_rls_hint(e)
            raise PersistenceError(f"Failed to create workout: {e}") from e

        if not result.data:
            raise PersistenceError(f"Failed to create workout {workout.id}")
        logger.info(f"Workout {workout.id} created for user {workout.user_id}")
        return db_row_to_workout(result.data[0])

    def find_by_id(self, workout_id: str, user_id: Optional[str] = None) -> Optional[Workout]:
        try:
            query = self._client.table(TABLE).select("*").eq("id", workout_id)
            if user_id is not None:
                query = query.eq("user_id", user_id)
            result = query.limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to get workout {workout_id}: {e}")
            _log_rls_hint(e)
            raise PersistenceError(f"Failed to get workout: {e}") from e
        if not result.data:
            return None
        return db_row_to_workout(result.data[0])

    def update(self, workout: Workout) -> Optional[Workout]:
        row = workout_to_db_row(workout)
        row.pop("id")
        try:
            result = self._client.table(TABLE).update(row).eq("id", workout.id).execute()
        except Exception as e:
            logger.error(f"Failed to update workout {workout.id}: {e}")
            _log_rls_hint(e)
            raise PersistenceError(f"Failed to update workout: {e}") from e

        if not result.data:
            logger.warning(f"No workout found with id {workout.id} (0 rows updated)")
            return None
        return db_row_to_workout(result.data[0])

    def delete(self, workout_id: str, user_id: Optional[str] = None) -> bool:
        try:
            logger.info(f"Attempting to delete workout {workout_id}")
            query = self._client.table(TABLE).delete().eq("id", workout_id)
            if user_id is not None:
                query = query.eq("user_id", user_id)
            result = query.execute()
        except Exception as e:
            logger.error(f"Failed to delete workout {workout_id}: {e}")
            raise PersistenceError(f"Failed to delete workout: {e}") from e

        deleted_count = len(result.data) if result.data else 0
        if deleted_count == 0:
            logger.warning(f"No workout found with id {workout_id} (0 rows deleted)")
            return False
        logger.info(f"Workout {workout_id} deleted successfully ({deleted_count} row(s))")
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
        try:
            query = self._client.table(TABLE).select("*", count="exact").eq("user_id", user_id)
            if date_from:
                query = query.gte("date", date_from)
            if date_to:
                query = query.lte("date", date_to)
            query = query.order("date", desc=True).range(offset, offset + limit - 1)
            result = query.execute()
        except Exception as e:
            logger.error(f"Failed to list workouts for user {user_id}: {e}")
            raise PersistenceError(f"Failed to list workouts: {e}") from e

        rows = result.data or []
        total = result.count if result.count is not None else len(rows)
        return WorkoutPage(workouts=[db_row_to_workout(r) for r in rows], total=total)

    # -------------------------------------------------------------------------
    # Nested id resolution
    # -------------------------------------------------------------------------

    def _find_owner(self, containment: Dict[str, Any], nested_id: str) -> Optional[str]:
        try:
            result = (
                self._client.table(TABLE)
                .select("id")
                .contains("workout_data", containment)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to resolve owning workout for {nested_id}: {e}")
            raise PersistenceError(f"Failed to resolve owning workout: {e}") from e
        if not result.data:
            return None
        return result.data[0]["id"]

    def find_workout_id_by_block_id(self, block_id: str) -> Optional[str]:
        return self._find_owner({"blocks": [{"id": block_id}]}, block_id)

    def find_workout_id_by_exercise_id(self, exercise_instance_id: str) -> Optional[str]:
        return self._find_owner(
            {"blocks": [{"exercises": [{"id": exercise_instance_id}]}]},
            exercise_instance_id,
        )

    def find_workout_id_by_set_id(self, set_id: str) -> Optional[str]:
        return self._find_owner(
            {"blocks": [{"exercises": [{"sets": [{"id": set_id}]}]}]},
            set_id,
        )
