"""
Application-layer exceptions.

These exceptions are used across the parsing pipeline, the workout use cases
and the infrastructure adapters. Every error carries a human-readable message
and an HTTP-style status classification so an outer surface (CLI, web handler)
can report it without inspecting the exception type.
"""
from typing import List, Optional


class WorkoutServiceError(Exception):
    """Base class for all workout service errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        """True for 4xx classifications."""
        return 400 <= self.status_code < 500

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message, "status": self.status_code}


# =============================================================================
# Input / classification
# =============================================================================


class InvalidInput(WorkoutServiceError):
    """User text rejected by the input sanitizer. Terminal, never retried."""

    status_code = 400


class NotWorkoutContent(WorkoutServiceError):
    """The classifier rejected the text as non-workout content."""

    status_code = 400

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        confidence: Optional[float] = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.confidence = confidence


# =============================================================================
# Malformed model output (fatal per request)
# =============================================================================


class ClassificationParseError(WorkoutServiceError):
    """Classifier output did not parse into {isWorkout, confidence, reason?}."""


class SemanticValidationParseError(WorkoutServiceError):
    """Semantic validation output did not parse into {issues: [...]}."""


class SemanticFixParseError(WorkoutServiceError):
    """Semantic fix output did not parse into a workout draft."""


class DraftSchemaError(WorkoutServiceError):
    """Draft still violates the draft schema after the repair iteration limit."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


# =============================================================================
# LLM gateway
# =============================================================================


class LLMCallError(WorkoutServiceError):
    """Transport or provider failure while calling the language model."""

    status_code = 502


class LLMResponseParseError(WorkoutServiceError):
    """The provider response could not be decoded as JSON."""

    status_code = 502

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


# =============================================================================
# Exercises / aggregate
# =============================================================================


class ExerciseResolutionError(WorkoutServiceError):
    """A free-text exercise mention could not be mapped to a catalog id."""

    status_code = 422

    def __init__(self, message: str, exercise_name: Optional[str] = None):
        super().__init__(message)
        self.exercise_name = exercise_name


class AggregateNotFound(WorkoutServiceError):
    """No owning Workout resolves for the supplied (possibly nested) id."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(WorkoutServiceError):
    """A repository write did not complete."""
