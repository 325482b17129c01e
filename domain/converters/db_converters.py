"""
Converters: Database row format <-> domain Workout.

Provides bidirectional conversion between Supabase database rows
and the Workout aggregate. The aggregate is stored whole: the nested
structure lives in a JSONB column and only the columns needed for
filtering are broken out.

Database schema (workouts table):
- id: UUID
- user_id: Owning user
- name: Workout name
- date: DATE (YYYY-MM-DD)
- notes: Workout notes
- workout_data: JSONB ({"blocks": [...]}, camelCase keys)
- last_modified_time: TIMESTAMPTZ
"""

from datetime import datetime
from typing import Any, Dict, Optional

from domain.models import Workout


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse datetime from various formats."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            # Handle ISO format with Z suffix
            if value.endswith("Z"):
                value = value[:-1] + "+00:00"
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def db_row_to_workout(row: Dict[str, Any]) -> Workout:
    """
    Convert a database row to the Workout aggregate.

    Args:
        row: Dictionary representing a row from the workouts table.

    Returns:
        Workout aggregate.

    Raises:
        ValueError: If workout_data is missing.

    Examples:
        >>> row = {
        ...     "id": "123e4567-e89b-12d3-a456-426614174000",
        ...     "user_id": "user-1",
        ...     "name": "Push Day",
        ...     "date": "2025-01-15",
        ...     "workout_data": {"blocks": []},
        ...     "last_modified_time": "2025-01-15T10:00:00Z",
        ... }
        >>> db_row_to_workout(row).name
        'Push Day'
    """
    workout_data = row.get("workout_data")
    if workout_data is None:
        raise ValueError("Database row missing workout_data")

    payload: Dict[str, Any] = {
        "id": row["id"],
        "userId": row.get("user_id"),
        "name": row["name"],
        "date": str(row["date"]),
        "notes": row.get("notes"),
        "blocks": workout_data.get("blocks", []),
    }
    last_modified = _parse_datetime(row.get("last_modified_time"))
    if last_modified is not None:
        payload["lastModifiedTime"] = last_modified
    return Workout.model_validate(payload)


def workout_to_db_row(workout: Workout) -> Dict[str, Any]:
    """
    Convert the Workout aggregate to database row format.

    Args:
        workout: Aggregate to convert.

    Returns:
        Dictionary with database column values.
    """
    data = workout.to_json_dict()
    return {
        "id": workout.id,
        "user_id": workout.user_id,
        "name": workout.name,
        "date": workout.date,
        "notes": workout.notes,
        "workout_data": {"blocks": data["blocks"]},
        "last_modified_time": data["lastModifiedTime"],
    }
