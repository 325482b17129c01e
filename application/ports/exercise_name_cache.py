"""
Exercise Name Cache Interface (Port).

Maps exercise names to catalog ids under a normalized key (see
backend.core.normalize.normalize_for_cache). Operations are individually
idempotent and need no locking; a read between an invalidate and the next set
can observe a transient miss. Backend failures are treated as misses.
"""
from typing import Iterable, Mapping, Optional, Protocol

from domain.models import Exercise


class ExerciseNameCache(Protocol):
    """Shared name -> exercise id cache."""

    def get(self, name: str) -> Optional[str]:
        """Get the cached exercise id for a name, or None on a miss."""
        ...

    def set(self, name: str, exercise_id: str) -> None:
        """Cache the exercise id for a name."""
        ...

    def set_many(self, mapping: Mapping[str, str]) -> None:
        """Cache several name -> id entries."""
        ...

    def invalidate(self, name: str) -> None:
        """Drop the entry for a name."""
        ...

    def clear(self) -> None:
        """Drop every exercise name entry."""
        ...

    def warmup(self, exercises: Iterable[Exercise]) -> int:
        """
        Pre-populate the cache from catalog exercises (names and aliases).

        Returns:
            Number of entries written
        """
        ...
