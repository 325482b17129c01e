"""
Infrastructure Layer for the workout parsing service.

This package contains concrete implementations of the repository and cache
interfaces:
- db/: Supabase and in-memory repositories
- cache/: Redis and in-memory exercise name caches
"""

# Re-export adapters for convenient access
from infrastructure.db import (
    SupabaseWorkoutRepository,
    SupabaseExerciseRepository,
    InMemoryWorkoutRepository,
    InMemoryExerciseRepository,
)
from infrastructure.cache import InMemoryExerciseNameCache, RedisExerciseNameCache

__all__ = [
    "SupabaseWorkoutRepository",
    "SupabaseExerciseRepository",
    "InMemoryWorkoutRepository",
    "InMemoryExerciseRepository",
    "InMemoryExerciseNameCache",
    "RedisExerciseNameCache",
]
