"""
Parse Workout Use Case.

Turns free-form workout text into a persisted Workout aggregate:

    raw text -> InputSanitizer -> WorkoutValidator (reject early) ->
    DraftProducer -> ExerciseNameResolver -> SemanticFixer ->
    ExerciseNameResolver (exercises added by the fixer) -> Workout -> repository

Every stage runs sequentially; each LLM call completes before the next one is
issued. Errors from any stage abort the request and propagate unchanged.
"""
import logging
from dataclasses import dataclass
from datetime import date as date_type
from typing import TYPE_CHECKING, Optional

from application.exceptions import ExerciseResolutionError, NotWorkoutContent
from application.ports import (
    DraftProducer,
    ExerciseNameResolver,
    TokenUsage,
    WorkoutRepository,
)
from domain.converters import draft_to_workout
from domain.models import ValidationResult, WeightUnit, Workout, WorkoutDraft

if TYPE_CHECKING:
    from backend.services.input_sanitizer import InputSanitizer
    from backend.services.semantic_fixer import SemanticFixer, SemanticFixResult
    from backend.services.token_counter import TokenUsageCounter
    from backend.services.workout_validator import WorkoutValidator

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.7

LOW_CONFIDENCE_MESSAGE = (
    "Unable to confidently determine if this is workout content. "
    "Please provide clearer workout information."
)
NOT_WORKOUT_MESSAGE = "The provided text does not appear to be workout content."


@dataclass
class ParseWorkoutResult:
    """Result of parsing workout text."""
    workout: Workout
    draft: WorkoutDraft
    classification: ValidationResult
    fix_result: "SemanticFixResult"
    persisted: bool = False
    usage: Optional[TokenUsage] = None


class ParseWorkoutUseCase:
    """
    Pipeline orchestrator for workout text parsing.

    All collaborators are injected; storage and model provider are decided by
    the composition root.
    """

    def __init__(
        self,
        sanitizer: "InputSanitizer",
        validator: "WorkoutValidator",
        producer: DraftProducer,
        resolver: ExerciseNameResolver,
        fixer: "SemanticFixer",
        workout_repo: Optional[WorkoutRepository] = None,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        usage_counter: Optional["TokenUsageCounter"] = None,
    ):
        """
        Initialize with required dependencies.

        Args:
            sanitizer: Guards user text before it reaches any prompt
            validator: Workout / not-workout classifier
            producer: Produces the first draft from sanitized text
            resolver: Maps exercise names to catalog ids
            fixer: Bounded semantic repair loop
            workout_repo: When given, the resulting workout is persisted
            confidence_threshold: Minimum classifier confidence to proceed
            usage_counter: Token counter the gateway records into
        """
        self._sanitizer = sanitizer
        self._validator = validator
        self._producer = producer
        self._resolver = resolver
        self._fixer = fixer
        self._workout_repo = workout_repo
        self._confidence_threshold = confidence_threshold
        self._usage_counter = usage_counter

    def execute(
        self,
        text: str,
        *,
        date: Optional[str] = None,
        weight_unit: WeightUnit = WeightUnit.LBS,
        user_id: Optional[str] = None,
    ) -> ParseWorkoutResult:
        """
        Parse workout text into a Workout.

        Args:
            text: Raw user text
            date: Workout date (YYYY-MM-DD), defaults to today
            weight_unit: Default weight unit for sets
            user_id: Owning user

        Returns:
            ParseWorkoutResult with the final workout and stage details

        Raises:
            InvalidInput: Text rejected by the sanitizer
            NotWorkoutContent: Classifier rejected the text
            WorkoutServiceError: Any other stage failure
        """
        if self._usage_counter is None:
            return self._run(text, date, weight_unit, user_id)

        with self._usage_counter.track() as request_usage:
            result = self._run(text, date, weight_unit, user_id)
        result.usage = request_usage.usage
        logger.debug(
            f"Request used {result.usage.input_tokens} input / {result.usage.output_tokens} output tokens"
        )
        return result

    def _run(
        self,
        text: str,
        date: Optional[str],
        weight_unit: WeightUnit,
        user_id: Optional[str],
    ) -> ParseWorkoutResult:
        workout_date = date or date_type.today().isoformat()

        clean_text = self._sanitizer.sanitize(text)

        classification = self._validator.classify(clean_text)
        self._reject_if_not_workout(classification)
        logger.info(
            f"Text classified as workout (confidence={classification.confidence:.2f}), extracting structure"
        )

        draft = self._producer.produce(clean_text, date=workout_date, weight_unit=weight_unit)
        draft = self._resolver.resolve(draft, user_id=user_id)

        fix_result = self._fixer.run(clean_text, draft)
        draft = fix_result.draft
        if not draft.is_resolved:
            logger.info(f"Resolving exercises added during repair: {draft.unresolved_names}")
            draft = self._resolver.resolve(draft, user_id=user_id)
        if not draft.is_resolved:
            names = ", ".join(draft.unresolved_names)
            raise ExerciseResolutionError(f"Unresolved exercises after repair: {names}")

        workout = draft_to_workout(draft, user_id=user_id)

        persisted = False
        if self._workout_repo is not None:
            workout = self._workout_repo.create(workout)
            persisted = True

        logger.info(
            f"Parsed workout {workout.id}: {workout.block_count} blocks, "
            f"{workout.total_exercises} exercises, {workout.total_sets} sets "
            f"({fix_result.outcome.value} after {fix_result.iterations} repair round(s))"
        )
        return ParseWorkoutResult(
            workout=workout,
            draft=draft,
            classification=classification,
            fix_result=fix_result,
            persisted=persisted,
        )

    def _reject_if_not_workout(self, classification: ValidationResult) -> None:
        if not classification.is_workout:
            reason = classification.reason or ""
            logger.warning(f"Text rejected as non-workout content: {reason}")
            raise NotWorkoutContent(
                f"{NOT_WORKOUT_MESSAGE} {reason}".strip(),
                reason=classification.reason,
                confidence=classification.confidence,
            )
        if not classification.is_confident(self._confidence_threshold):
            logger.warning(
                f"Classifier confidence {classification.confidence:.2f} below "
                f"threshold {self._confidence_threshold}"
            )
            raise NotWorkoutContent(
                LOW_CONFIDENCE_MESSAGE,
                reason=classification.reason,
                confidence=classification.confidence,
            )
