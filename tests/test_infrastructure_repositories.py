"""
Tests for infrastructure repository implementations.

These tests verify that the in-memory and Supabase repository implementations
implement the protocol interfaces and behave the same way at the aggregate
boundary. Supabase is exercised through a mocked query builder.

Run the database tests with: pytest -m e2e
"""
import pytest
from unittest.mock import MagicMock

from application.exceptions import PersistenceError
from application.ports import ExerciseFilters
from domain.converters import workout_to_db_row
from domain.models import Exercise, SetUpdate
from infrastructure.db import (
    InMemoryExerciseRepository,
    InMemoryWorkoutRepository,
    SupabaseExerciseRepository,
    SupabaseWorkoutRepository,
    WorkoutAggregateMutations,
    load_exercise_catalog,
)
from tests.fakes import BENCH_PRESS_ID, SQUAT_ID, make_block, make_catalog, make_exercise, make_workout

QUERY_METHODS = (
    "select", "insert", "update", "delete", "eq", "neq", "gte", "lte",
    "ilike", "contains", "order", "range", "limit",
)


def mock_supabase(data=None, count=None):
    """A client whose query builder chains onto itself and returns ``data``."""
    client = MagicMock()
    query = MagicMock()
    client.table.return_value = query
    for method in QUERY_METHODS:
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=data, count=count)
    return client, query


# ============================================================================
# Protocol compliance
# ============================================================================

@pytest.mark.unit
class TestProtocolCompliance:
    """Test that implementations match their Protocol interfaces."""

    WORKOUT_METHODS = [
        "create", "find_by_id", "update", "delete", "find_by_user_id",
        "add_block", "delete_block", "add_exercise_to_block",
        "delete_exercise_instance", "update_set",
        "find_workout_id_by_block_id", "find_workout_id_by_exercise_id",
        "find_workout_id_by_set_id",
    ]
    EXERCISE_METHODS = [
        "find_by_id", "find_by_slug", "find_by_name", "find_all",
        "create", "update", "delete", "check_duplicate_name",
    ]

    @pytest.mark.parametrize("cls", [SupabaseWorkoutRepository, InMemoryWorkoutRepository])
    def test_workout_repository_has_required_methods(self, cls):
        for method in self.WORKOUT_METHODS:
            assert hasattr(cls, method), f"Missing method: {method}"

    @pytest.mark.parametrize("cls", [SupabaseExerciseRepository, InMemoryExerciseRepository])
    def test_exercise_repository_has_required_methods(self, cls):
        for method in self.EXERCISE_METHODS:
            assert hasattr(cls, method), f"Missing method: {method}"

    def test_backend_missing_hook_cannot_be_created(self):
        class PartialRepository(WorkoutAggregateMutations):
            def find_by_id(self, workout_id, user_id=None):
                return None

            def update(self, workout):
                return workout

        with pytest.raises(TypeError):
            PartialRepository()


# ============================================================================
# In-memory repositories
# ============================================================================

@pytest.mark.unit
class TestInMemoryWorkoutRepository:
    """Tests for InMemoryWorkoutRepository."""

    @pytest.fixture
    def repo(self):
        return InMemoryWorkoutRepository()

    def test_create_and_find(self, repo):
        workout = make_workout(user_id="user-1")
        repo.create(workout)

        assert repo.find_by_id(workout.id) == workout
        assert repo.find_by_id(workout.id, user_id="user-1") == workout
        assert repo.find_by_id(workout.id, user_id="user-2") is None

    def test_create_duplicate_id(self, repo):
        workout = make_workout()
        repo.create(workout)
        with pytest.raises(PersistenceError):
            repo.create(workout)

    def test_returned_copies_are_isolated(self, repo):
        workout = make_workout()
        repo.create(workout)

        fetched = repo.find_by_id(workout.id)
        fetched.blocks.clear()

        assert repo.find_by_id(workout.id).block_count == 2

    def test_update_missing(self, repo):
        assert repo.update(make_workout()) is None

    def test_delete_respects_owner(self, repo):
        workout = make_workout(user_id="user-1")
        repo.create(workout)

        assert repo.delete(workout.id, user_id="user-2") is False
        assert repo.delete(workout.id, user_id="user-1") is True
        assert repo.find_by_id(workout.id) is None

    def test_find_by_user_id(self, repo):
        for day in ("2025-01-01", "2025-01-03", "2025-01-02"):
            repo.create(make_workout(user_id="user-1", date=day))
        repo.create(make_workout(user_id="user-2", date="2025-01-04"))

        page = repo.find_by_user_id("user-1", limit=2, offset=0)

        assert [w.date for w in page.workouts] == ["2025-01-03", "2025-01-02"]
        assert page.total == 3

    def test_nested_id_lookup(self, repo):
        workout = make_workout()
        repo.create(workout)
        block = workout.blocks[1]
        exercise = block.exercises[0]

        assert repo.find_workout_id_by_block_id(block.id) == workout.id
        assert repo.find_workout_id_by_exercise_id(exercise.id) == workout.id
        assert repo.find_workout_id_by_set_id(exercise.sets[0].id) == workout.id
        assert repo.find_workout_id_by_set_id("missing") is None

    def test_sub_operations_write_whole_aggregate(self, repo):
        workout = make_workout()
        repo.create(workout)
        set_id = workout.blocks[0].exercises[0].sets[0].id

        updated = repo.update_set(set_id, SetUpdate(reps=12))

        assert updated.find_set(set_id)[2].reps == 12
        assert repo.find_by_id(workout.id) == updated

    def test_sub_operation_unknown_id(self, repo):
        repo.create(make_workout())
        assert repo.delete_block("missing") is None
        assert repo.add_exercise_to_block("missing", make_exercise()) is None
        assert repo.add_block("missing", make_block()) is None


@pytest.mark.unit
class TestInMemoryExerciseRepository:
    """Tests for InMemoryExerciseRepository."""

    @pytest.fixture
    def repo(self):
        return InMemoryExerciseRepository(make_catalog())

    def test_find_by_name_prefers_names_over_aliases(self, repo):
        repo.create(Exercise(id="ex-other", name="Bench Press", slug="bench-press"))
        assert repo.find_by_name("bench press").id == "ex-other"

    def test_find_by_alias(self, repo):
        assert repo.find_by_name("BACK SQUAT").id == SQUAT_ID

    def test_find_all_filters(self, repo):
        assert [e.id for e in repo.find_all(ExerciseFilters(category="legs"))] == [SQUAT_ID]
        assert len(repo.find_all(ExerciseFilters(equipment="barbell"))) == 2
        assert [e.name for e in repo.find_all(ExerciseFilters(search="row"))] == ["Dumbbell Row"]

    def test_find_all_paging(self, repo):
        names = [e.name for e in repo.find_all(ExerciseFilters(limit=2, offset=1))]
        assert names == ["Barbell Bench Press", "Dumbbell Row"]

    def test_check_duplicate_name(self, repo):
        assert repo.check_duplicate_name("pull-up")
        assert not repo.check_duplicate_name("pull-up", exclude_id="ex-pull-up")

    def test_seed_catalog_loads(self):
        catalog = load_exercise_catalog()
        assert catalog
        assert len({e.slug for e in catalog}) == len(catalog)
        assert all(e.name and e.id for e in catalog)


# ============================================================================
# Supabase repositories (mocked client)
# ============================================================================

@pytest.mark.unit
class TestSupabaseWorkoutRepository:
    """Tests for SupabaseWorkoutRepository against a mocked client."""

    def test_create(self):
        workout = make_workout(user_id="user-1")
        client, query = mock_supabase(data=[workout_to_db_row(workout)])

        created = SupabaseWorkoutRepository(client).create(workout)

        assert created == workout
        client.table.assert_called_with("workouts")
        query.insert.assert_called_once_with(workout_to_db_row(workout))

    def test_create_failure_raises(self):
        client, query = mock_supabase()
        query.execute.side_effect = Exception("permission denied for table workouts")

        with pytest.raises(PersistenceError):
            SupabaseWorkoutRepository(client).create(make_workout())

    def test_create_without_rows_raises(self):
        client, _ = mock_supabase(data=[])
        with pytest.raises(PersistenceError):
            SupabaseWorkoutRepository(client).create(make_workout())

    def test_find_by_id_scoped_to_user(self):
        workout = make_workout(user_id="user-1")
        client, query = mock_supabase(data=[workout_to_db_row(workout)])

        found = SupabaseWorkoutRepository(client).find_by_id(workout.id, user_id="user-1")

        assert found == workout
        query.eq.assert_any_call("id", workout.id)
        query.eq.assert_any_call("user_id", "user-1")

    def test_find_by_id_miss(self):
        client, _ = mock_supabase(data=[])
        assert SupabaseWorkoutRepository(client).find_by_id("w-1") is None

    def test_find_by_id_failure_raises(self):
        client, query = mock_supabase()
        query.execute.side_effect = Exception("connection refused")
        with pytest.raises(PersistenceError):
            SupabaseWorkoutRepository(client).find_by_id("w-1")

    def test_update_no_rows(self):
        client, _ = mock_supabase(data=[])
        assert SupabaseWorkoutRepository(client).update(make_workout()) is None

    def test_update_failure_raises(self):
        client, query = mock_supabase()
        query.execute.side_effect = Exception("boom")
        with pytest.raises(PersistenceError):
            SupabaseWorkoutRepository(client).update(make_workout())

    def test_delete(self):
        client, _ = mock_supabase(data=[{"id": "w-1"}])
        assert SupabaseWorkoutRepository(client).delete("w-1", user_id="user-1") is True

        client, _ = mock_supabase(data=[])
        assert SupabaseWorkoutRepository(client).delete("w-1") is False

    def test_find_by_user_id_query(self):
        workout = make_workout(user_id="user-1")
        client, query = mock_supabase(data=[workout_to_db_row(workout)], count=41)

        page = SupabaseWorkoutRepository(client).find_by_user_id(
            "user-1", date_from="2025-01-01", date_to="2025-01-31", limit=20, offset=20
        )

        assert page.total == 41
        assert page.workouts == [workout]
        query.select.assert_called_once_with("*", count="exact")
        query.gte.assert_called_once_with("date", "2025-01-01")
        query.lte.assert_called_once_with("date", "2025-01-31")
        query.order.assert_called_once_with("date", desc=True)
        query.range.assert_called_once_with(20, 39)

    def test_find_by_user_id_failure_raises(self):
        client, query = mock_supabase()
        query.execute.side_effect = Exception("connection refused")
        with pytest.raises(PersistenceError):
            SupabaseWorkoutRepository(client).find_by_user_id("user-1")

    def test_owner_lookup_uses_containment(self):
        client, query = mock_supabase(data=[{"id": "w-1"}])
        repo = SupabaseWorkoutRepository(client)

        assert repo.find_workout_id_by_set_id("s-1") == "w-1"
        query.contains.assert_called_once_with(
            "workout_data", {"blocks": [{"exercises": [{"sets": [{"id": "s-1"}]}]}]}
        )

    def test_owner_lookup_miss(self):
        client, _ = mock_supabase(data=[])
        assert SupabaseWorkoutRepository(client).find_workout_id_by_block_id("b-1") is None

    def test_owner_lookup_failure_raises(self):
        client, query = mock_supabase()
        query.execute.side_effect = Exception("connection refused")
        with pytest.raises(PersistenceError):
            SupabaseWorkoutRepository(client).find_workout_id_by_set_id("s-1")

    def test_sub_operation_reads_then_writes(self):
        workout = make_workout()
        block_id = workout.blocks[0].id
        client, query = mock_supabase(data=[workout_to_db_row(workout)])
        repo = SupabaseWorkoutRepository(client)
        repo.find_workout_id_by_block_id = MagicMock(return_value=workout.id)

        repo.delete_block(block_id)

        written = query.update.call_args.args[0]
        assert [b["id"] for b in written["workout_data"]["blocks"]] == [workout.blocks[1].id]
        query.eq.assert_any_call("id", workout.id)


@pytest.mark.unit
class TestSupabaseExerciseRepository:
    """Tests for SupabaseExerciseRepository against a mocked client."""

    ROW = {
        "id": BENCH_PRESS_ID,
        "name": "Barbell Bench Press",
        "slug": "barbell-bench-press",
        "category": "chest",
        "equipment": ["barbell"],
        "primary_muscles": None,
        "aliases": ["Bench Press"],
        "tags": None,
    }

    def test_find_by_slug(self):
        client, query = mock_supabase(data=[self.ROW])

        exercise = SupabaseExerciseRepository(client).find_by_slug("barbell-bench-press")

        assert exercise.id == BENCH_PRESS_ID
        assert exercise.primary_muscles == []
        query.eq.assert_called_once_with("slug", "barbell-bench-press")

    def test_find_by_name_exact(self):
        client, query = mock_supabase(data=[self.ROW])

        assert SupabaseExerciseRepository(client).find_by_name("barbell bench press").id == BENCH_PRESS_ID
        query.ilike.assert_called_once_with("name", "barbell bench press")
        query.contains.assert_not_called()

    def test_find_by_name_falls_back_to_alias(self):
        client, query = mock_supabase()
        query.execute.side_effect = [MagicMock(data=[]), MagicMock(data=[self.ROW])]

        assert SupabaseExerciseRepository(client).find_by_name("Bench Press").id == BENCH_PRESS_ID
        query.contains.assert_called_once_with("aliases", ["Bench Press"])

    def test_find_by_name_error_is_none(self):
        client, query = mock_supabase()
        query.execute.side_effect = Exception("boom")
        assert SupabaseExerciseRepository(client).find_by_name("Bench Press") is None

    def test_find_all_filters(self):
        client, query = mock_supabase(data=[self.ROW])

        SupabaseExerciseRepository(client).find_all(
            ExerciseFilters(search="bench", category="chest", equipment="barbell", limit=10, offset=0)
        )

        query.ilike.assert_called_once_with("name", "%bench%")
        query.eq.assert_called_once_with("category", "chest")
        query.contains.assert_called_once_with("equipment", ["barbell"])
        query.range.assert_called_once_with(0, 9)

    def test_create_failure_raises(self):
        client, query = mock_supabase()
        query.execute.side_effect = Exception("duplicate key")
        with pytest.raises(PersistenceError):
            SupabaseExerciseRepository(client).create(make_catalog()[0])

    def test_check_duplicate_name_excludes_id(self):
        client, query = mock_supabase(data=[])

        assert SupabaseExerciseRepository(client).check_duplicate_name("Pull-Up", exclude_id="ex-1") is False
        query.neq.assert_called_once_with("id", "ex-1")


# ============================================================================
# E2E Tests (require real database connection - nightly runs only)
# ============================================================================

def _is_real_supabase_url(url: str) -> bool:
    """Check if URL looks like a real Supabase URL (not a test placeholder)."""
    if not url:
        return False
    return (
        url.startswith("https://") and
        ".supabase.co" in url and
        url != "https://test.supabase.co" and
        len(url) > 30
    )


@pytest.mark.e2e
class TestWorkoutRepositoryIntegration:
    """E2E tests for SupabaseWorkoutRepository (requires real database)."""

    @pytest.fixture
    def supabase_client(self):
        """Get a real Supabase client for e2e tests."""
        import os
        from supabase import create_client

        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            pytest.skip("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required for e2e tests")

        if not _is_real_supabase_url(url):
            pytest.skip("Real Supabase credentials required for e2e tests (not test placeholders)")

        return create_client(url, key)

    def test_create_update_set_and_delete(self, supabase_client):
        import uuid

        repo = SupabaseWorkoutRepository(supabase_client)
        workout = make_workout(user_id=f"test_user_{uuid.uuid4().hex[:8]}")
        set_id = workout.blocks[0].exercises[0].sets[0].id

        repo.create(workout)
        try:
            assert repo.find_workout_id_by_set_id(set_id) == workout.id
            updated = repo.update_set(set_id, SetUpdate(reps=11))
            assert updated.find_set(set_id)[2].reps == 11
        finally:
            repo.delete(workout.id, workout.user_id)
