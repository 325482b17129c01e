"""
Composition root.

The only place that reads ``storage_backend`` / ``cache_backend`` and picks
concrete adapters. Builders are cached per process (lru_cache), like the
settings they read; call ``reset_container()`` after changing settings.

Usage:
    from backend.container import get_parse_workout_use_case

    result = get_parse_workout_use_case().execute(text, user_id="user-1")
"""
import logging
from functools import lru_cache

import sentry_sdk
from supabase import Client, create_client

from application.ports import ExerciseNameCache, ExerciseRepository, WorkoutRepository
from application.use_cases import (
    EditWorkoutStructureUseCase,
    ManageWorkoutUseCase,
    ParseWorkoutUseCase,
)
from backend.ai.llm_gateway import AnthropicLLMGateway
from backend.services.draft_schema_fixer import DraftSchemaFixer
from backend.services.exercise_resolver import CatalogExerciseResolver
from backend.services.input_sanitizer import InputSanitizer
from backend.services.semantic_fixer import SemanticFixer
from backend.services.structure_extractor import StructureExtractor
from backend.services.token_counter import TokenUsageCounter
from backend.services.workout_validator import WorkoutValidator
from backend.settings import Settings, get_settings
from infrastructure.cache import InMemoryExerciseNameCache, RedisExerciseNameCache
from infrastructure.db import (
    InMemoryExerciseRepository,
    InMemoryWorkoutRepository,
    SupabaseExerciseRepository,
    SupabaseWorkoutRepository,
    load_exercise_catalog,
)

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized for workout parser")


# =============================================================================
# Storage
# =============================================================================


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("storage_backend is 'supabase' but Supabase credentials are not configured")
    return create_client(settings.supabase_url, settings.supabase_key)


@lru_cache
def get_workout_repo() -> WorkoutRepository:
    if get_settings().storage_backend == "supabase":
        return SupabaseWorkoutRepository(get_supabase_client())
    return InMemoryWorkoutRepository()


@lru_cache
def get_exercise_repo() -> ExerciseRepository:
    if get_settings().storage_backend == "supabase":
        return SupabaseExerciseRepository(get_supabase_client())
    return InMemoryExerciseRepository(load_exercise_catalog())


@lru_cache
def get_exercise_name_cache() -> ExerciseNameCache:
    settings = get_settings()
    if settings.cache_backend == "redis":
        return RedisExerciseNameCache.from_url(
            settings.redis_url, ttl_seconds=settings.exercise_cache_ttl_seconds
        )
    return InMemoryExerciseNameCache(ttl_seconds=settings.exercise_cache_ttl_seconds)


# =============================================================================
# LLM + pipeline services
# =============================================================================


@lru_cache
def get_token_counter() -> TokenUsageCounter:
    return TokenUsageCounter()


@lru_cache
def get_llm_gateway() -> AnthropicLLMGateway:
    return AnthropicLLMGateway(settings=get_settings(), usage_counter=get_token_counter())


def get_input_sanitizer() -> InputSanitizer:
    return InputSanitizer(max_length=get_settings().max_workout_text_length)


def get_exercise_resolver() -> CatalogExerciseResolver:
    return CatalogExerciseResolver(
        get_exercise_repo(),
        get_exercise_name_cache(),
        gateway=get_llm_gateway(),
    )


@lru_cache
def get_parse_workout_use_case() -> ParseWorkoutUseCase:
    settings = get_settings()
    init_sentry(settings)
    gateway = get_llm_gateway()
    sanitizer = get_input_sanitizer()
    return ParseWorkoutUseCase(
        sanitizer=sanitizer,
        validator=WorkoutValidator(gateway),
        producer=StructureExtractor(
            gateway,
            schema_fixer=DraftSchemaFixer(gateway, max_iterations=settings.schema_fix_max_iterations),
        ),
        resolver=get_exercise_resolver(),
        fixer=SemanticFixer(
            gateway,
            max_iterations=settings.semantic_fix_max_iterations,
            sanitizer=sanitizer,
        ),
        workout_repo=get_workout_repo(),
        confidence_threshold=settings.workout_confidence_threshold,
        usage_counter=get_token_counter(),
    )


# =============================================================================
# Workout operations
# =============================================================================


def get_manage_workout_use_case() -> ManageWorkoutUseCase:
    return ManageWorkoutUseCase(get_workout_repo(), get_exercise_repo())


def get_edit_workout_structure_use_case() -> EditWorkoutStructureUseCase:
    return EditWorkoutStructureUseCase(get_workout_repo())


def reset_container() -> None:
    """Drop every cached builder (tests, settings changes)."""
    for builder in (
        get_supabase_client,
        get_workout_repo,
        get_exercise_repo,
        get_exercise_name_cache,
        get_token_counter,
        get_llm_gateway,
        get_parse_workout_use_case,
    ):
        builder.cache_clear()
