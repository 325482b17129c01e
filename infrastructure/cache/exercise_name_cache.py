"""
Exercise name -> catalog id caches.

Keys are ``exercise:name:<normalized name>`` where the name goes through
normalize_for_cache, so "Bench Press", "bench-press" and " BENCH  PRESS "
share one entry. Backend errors are logged and treated as a miss; a cache
failure never fails a request.
"""
import logging
import threading
import time
from typing import Dict, Iterable, Mapping, Optional, Tuple

import redis

from backend.core.normalize import normalize_for_cache
from domain.models import Exercise

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "exercise:name:"

# 24 hours
DEFAULT_TTL_SECONDS = 86400


def cache_key(name: str) -> Optional[str]:
    """Build the cache key for an exercise name, or None for a blank name."""
    normalized = normalize_for_cache(name)
    if not normalized:
        return None
    return f"{CACHE_KEY_PREFIX}{normalized}"


def _warmup_entries(exercises: Iterable[Exercise]) -> Dict[str, str]:
    entries: Dict[str, str] = {}
    for exercise in exercises:
        for name in exercise.all_names:
            entries.setdefault(name, exercise.id)
    return entries


class InMemoryExerciseNameCache:
    """Process-local ExerciseNameCache with per-entry expiry."""

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self._ttl_seconds = ttl_seconds
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> Optional[str]:
        key = cache_key(name)
        if key is None:
            return None
        entry = self._entries.get(key)
        if entry is None:
            return None
        exercise_id, expires_at = entry
        if expires_at <= time.monotonic():
            with self._lock:
                self._entries.pop(key, None)
            return None
        logger.debug(f"Exercise name cache hit: {key}")
        return exercise_id

    def set(self, name: str, exercise_id: str) -> None:
        key = cache_key(name)
        if key is None:
            return
        with self._lock:
            self._entries[key] = (exercise_id, time.monotonic() + self._ttl_seconds)

    def set_many(self, mapping: Mapping[str, str]) -> None:
        for name, exercise_id in mapping.items():
            self.set(name, exercise_id)

    def invalidate(self, name: str) -> None:
        key = cache_key(name)
        if key is None:
            return
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def warmup(self, exercises: Iterable[Exercise]) -> int:
        entries = _warmup_entries(exercises)
        self.set_many(entries)
        logger.info(f"Exercise name cache warmed with {len(entries)} entries")
        return len(entries)

    def __len__(self) -> int:
        return len(self._entries)


class RedisExerciseNameCache:
    """
    Redis-backed ExerciseNameCache shared across processes.

    Usage:
        cache = RedisExerciseNameCache(redis.from_url(url, decode_responses=True))
        cache.set("Bench Press", exercise_id)
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self._client = client
        self._ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> "RedisExerciseNameCache":
        return cls(redis.from_url(url, decode_responses=True), ttl_seconds=ttl_seconds)

    def get(self, name: str) -> Optional[str]:
        key = cache_key(name)
        if key is None:
            return None
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis cache read failed (treated as miss): {e}")
            return None
        if value is not None:
            logger.debug(f"Exercise name cache hit: {key}")
        return value

    def set(self, name: str, exercise_id: str) -> None:
        key = cache_key(name)
        if key is None:
            return
        try:
            self._client.set(key, exercise_id, ex=self._ttl_seconds)
        except redis.RedisError as e:
            logger.warning(f"Redis cache write failed: {e}")

    def set_many(self, mapping: Mapping[str, str]) -> None:
        keyed = {}
        for name, exercise_id in mapping.items():
            key = cache_key(name)
            if key is not None:
                keyed[key] = exercise_id
        if not keyed:
            return
        try:
            pipe = self._client.pipeline()
            for key, exercise_id in keyed.items():
                pipe.set(key, exercise_id, ex=self._ttl_seconds)
            pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Redis cache bulk write failed: {e}")

    def invalidate(self, name: str) -> None:
        key = cache_key(name)
        if key is None:
            return
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Redis cache invalidate failed: {e}")

    def clear(self) -> None:
        try:
            keys = list(self._client.scan_iter(match=f"{CACHE_KEY_PREFIX}*"))
            if keys:
                self._client.delete(*keys)
        except redis.RedisError as e:
            logger.warning(f"Redis cache clear failed: {e}")

    def warmup(self, exercises: Iterable[Exercise]) -> int:
        entries = _warmup_entries(exercises)
        self.set_many(entries)
        logger.info(f"Exercise name cache warmed with {len(entries)} entries")
        return len(entries)
