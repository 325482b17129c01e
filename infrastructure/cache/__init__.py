"""Exercise name -> id cache adapters."""

from infrastructure.cache.exercise_name_cache import (
    CACHE_KEY_PREFIX,
    InMemoryExerciseNameCache,
    RedisExerciseNameCache,
    cache_key,
)

__all__ = [
    "CACHE_KEY_PREFIX",
    "cache_key",
    "InMemoryExerciseNameCache",
    "RedisExerciseNameCache",
]
