"""
Interfaces (Ports) for the workout parsing service.

This package defines abstract interfaces that decouple pipeline and aggregate
logic from infrastructure (database, cache, LLM provider). Implementations are
provided in the infrastructure and backend layers.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the application needs)
- Adapters: Concrete implementations in infrastructure/ and backend/ai/

Usage:
    from application.ports import WorkoutRepository

    class DuplicateWorkoutUseCase:
        def __init__(self, workout_repo: WorkoutRepository):
            self._workout_repo = workout_repo
"""

# Workout aggregate persistence
from application.ports.workout_repository import WorkoutPage, WorkoutRepository

# Exercise catalog
from application.ports.exercise_repository import ExerciseFilters, ExerciseRepository

# Exercise name cache
from application.ports.exercise_name_cache import ExerciseNameCache

# Language model access
from application.ports.llm_gateway import (
    Continue,
    LLMGateway,
    LLMResponse,
    ModelTier,
    PrefilledJson,
    RawJson,
    ResponseDecoding,
    Stop,
    TokenUsage,
    ToolHandler,
    ToolOutcome,
    ToolSpec,
)

# Pipeline collaborators
from application.ports.pipeline import DraftProducer, ExerciseNameResolver

__all__ = [
    # Repositories
    "WorkoutRepository",
    "WorkoutPage",
    "ExerciseRepository",
    "ExerciseFilters",
    "ExerciseNameCache",
    # LLM gateway
    "LLMGateway",
    "LLMResponse",
    "ModelTier",
    "RawJson",
    "PrefilledJson",
    "ResponseDecoding",
    "TokenUsage",
    "ToolSpec",
    "ToolHandler",
    "ToolOutcome",
    "Continue",
    "Stop",
    # Pipeline collaborators
    "DraftProducer",
    "ExerciseNameResolver",
]
