"""
Unit tests for the exercise name caches.

Tests for:
- Key normalization shared by every backend
- In-memory expiry
- Redis commands and error handling (client mocked)
"""

from unittest.mock import MagicMock

import pytest
import redis

from infrastructure.cache import (
    CACHE_KEY_PREFIX,
    InMemoryExerciseNameCache,
    RedisExerciseNameCache,
    cache_key,
)
from tests.fakes import BENCH_PRESS_ID, SQUAT_ID, make_catalog


@pytest.mark.unit
class TestCacheKey:
    """Tests for cache_key."""

    def test_prefix_and_normalization(self):
        assert cache_key(" Bench-Press ") == f"{CACHE_KEY_PREFIX}bench_press"

    def test_blank_name(self):
        assert cache_key("  ") is None


@pytest.mark.unit
class TestInMemoryExerciseNameCache:
    """Tests for the process-local cache."""

    def test_set_and_get_normalized(self):
        cache = InMemoryExerciseNameCache()
        cache.set("Bench Press", BENCH_PRESS_ID)
        assert cache.get("bench-press") == BENCH_PRESS_ID
        assert cache.get(" BENCH  PRESS ") == BENCH_PRESS_ID

    def test_miss(self):
        assert InMemoryExerciseNameCache().get("Bench Press") is None

    def test_expired_entry_is_a_miss(self):
        cache = InMemoryExerciseNameCache(ttl_seconds=0)
        cache.set("Bench Press", BENCH_PRESS_ID)

        assert cache.get("Bench Press") is None
        assert len(cache) == 0

    def test_invalidate(self):
        cache = InMemoryExerciseNameCache()
        cache.set_many({"Bench Press": BENCH_PRESS_ID, "Back Squat": SQUAT_ID})

        cache.invalidate("bench press")

        assert cache.get("Bench Press") is None
        assert cache.get("Back Squat") == SQUAT_ID

    def test_clear(self):
        cache = InMemoryExerciseNameCache()
        cache.set("Bench Press", BENCH_PRESS_ID)
        cache.clear()
        assert len(cache) == 0

    def test_blank_names_ignored(self):
        cache = InMemoryExerciseNameCache()
        cache.set("  ", BENCH_PRESS_ID)
        assert len(cache) == 0
        assert cache.get("") is None

    def test_warmup_names_and_aliases(self):
        cache = InMemoryExerciseNameCache()

        count = cache.warmup(make_catalog())

        # 4 names plus 5 aliases
        assert count == 9
        assert cache.get("Flat Bench") == BENCH_PRESS_ID
        assert cache.get("Barbell Back Squat") == SQUAT_ID


@pytest.mark.unit
class TestRedisExerciseNameCache:
    """Tests for the Redis-backed cache."""

    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def cache(self, client):
        return RedisExerciseNameCache(client, ttl_seconds=60)

    def test_get(self, cache, client):
        client.get.return_value = BENCH_PRESS_ID

        assert cache.get("Bench Press") == BENCH_PRESS_ID
        client.get.assert_called_once_with("exercise:name:bench_press")

    def test_get_miss(self, cache, client):
        client.get.return_value = None
        assert cache.get("Bench Press") is None

    def test_set_with_ttl(self, cache, client):
        cache.set("Bench Press", BENCH_PRESS_ID)
        client.set.assert_called_once_with("exercise:name:bench_press", BENCH_PRESS_ID, ex=60)

    def test_read_error_is_a_miss(self, cache, client):
        client.get.side_effect = redis.ConnectionError("connection refused")
        assert cache.get("Bench Press") is None

    def test_write_error_swallowed(self, cache, client):
        client.set.side_effect = redis.TimeoutError("timed out")
        cache.set("Bench Press", BENCH_PRESS_ID)

    def test_blank_name_never_reaches_redis(self, cache, client):
        assert cache.get(" ") is None
        cache.set(" ", BENCH_PRESS_ID)
        client.get.assert_not_called()
        client.set.assert_not_called()

    def test_set_many_uses_pipeline(self, cache, client):
        pipe = client.pipeline.return_value

        cache.set_many({"Bench Press": BENCH_PRESS_ID, "Back Squat": SQUAT_ID})

        assert pipe.set.call_count == 2
        pipe.execute.assert_called_once()

    def test_invalidate(self, cache, client):
        cache.invalidate("Bench Press")
        client.delete.assert_called_once_with("exercise:name:bench_press")

    def test_clear_deletes_prefixed_keys(self, cache, client):
        client.scan_iter.return_value = iter(["exercise:name:a", "exercise:name:b"])

        cache.clear()

        client.scan_iter.assert_called_once_with(match=f"{CACHE_KEY_PREFIX}*")
        client.delete.assert_called_once_with("exercise:name:a", "exercise:name:b")

    def test_warmup(self, cache, client):
        assert cache.warmup(make_catalog()) == 9
        assert client.pipeline.return_value.set.call_count == 9
