"""
Exercise name resolution for workout drafts.

Maps free-text exercise names to catalog exercise ids with a multi-stage
approach:
1. Normalized-key cache lookup
2. Exact name / alias match (case-insensitive)
3. Slug match
4. Fuzzy match using rapidfuzz
5. LLM fallback with tools (search_exercises, select_exercise)

Resolved ids are written back to the cache. Exercises that already carry an
exercise id are never touched.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from rapidfuzz import fuzz

from application.exceptions import ExerciseResolutionError, LLMCallError
from application.ports import (
    Continue,
    ExerciseFilters,
    ExerciseNameCache,
    ExerciseRepository,
    LLMGateway,
    ModelTier,
    Stop,
    ToolOutcome,
    ToolSpec,
)
from backend.core.normalize import normalize, normalize_for_slug
from domain.models import Exercise, WorkoutDraft

logger = logging.getLogger(__name__)


class ResolutionMethod(str, Enum):
    """How the exercise id was determined."""
    CACHE = "cache"
    EXACT = "exact"
    SLUG = "slug"
    FUZZY = "fuzzy"
    LLM = "llm"


@dataclass
class ExerciseResolution:
    """Result of resolving one exercise name."""
    name: str
    exercise_id: str
    method: ResolutionMethod
    confidence: float = 1.0


RESOLVER_SYSTEM_PROMPT = """You are an expert fitness assistant matching exercise names to exercises in our catalog.

Find the best matching catalog exercise for the user's input.

Guidelines:
- The input may contain modifiers such as "(alternating)", "(each side)" or "(single arm)" that are not part of catalog names
- Treat such variations as likely matches for the base exercise
- Search with different strategies: the name without modifiers, the equipment, the muscle group, similar exercises
- As soon as you find a good match, call select_exercise with its exercise_id

You must select an exercise. Choosing the closest alternative is expected when there is no exact match."""

SEARCH_TOOL = ToolSpec(
    name="search_exercises",
    description=(
        "Search the exercise catalog. Returns the best matching exercises with their "
        "id, name, category, equipment and primary muscles."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Exercise name, muscle group, equipment or category to search for.",
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of results (default 10).",
                "default": 10,
            },
        },
        "required": ["query"],
    },
)

SELECT_TOOL = ToolSpec(
    name="select_exercise",
    description="Select the final matching exercise once it has been identified.",
    input_schema={
        "type": "object",
        "properties": {
            "exercise_id": {"type": "string", "description": "Id of the selected exercise."},
            "reasoning": {"type": "string", "description": "Why this is the best match."},
        },
        "required": ["exercise_id", "reasoning"],
    },
)


class CatalogExerciseResolver:
    """
    ExerciseNameResolver backed by the exercise catalog and name cache.

    Usage:
        resolver = CatalogExerciseResolver(exercise_repo, cache, gateway=gateway)
        resolved_draft = resolver.resolve(draft)
    """

    FUZZY_AUTO_ACCEPT = 0.85
    CATALOG_LIMIT = 1000

    def __init__(
        self,
        exercise_repository: ExerciseRepository,
        cache: ExerciseNameCache,
        gateway: Optional[LLMGateway] = None,
        enable_llm_fallback: bool = True,
    ):
        """
        Initialize the resolver.

        Args:
            exercise_repository: Catalog repository
            cache: Shared name -> id cache
            gateway: LLM gateway for the tool-use fallback
            enable_llm_fallback: Whether to use the LLM when fuzzy matching fails
        """
        self._repo = exercise_repository
        self._cache = cache
        self._gateway = gateway
        self._enable_llm_fallback = enable_llm_fallback
        self._catalog: Optional[List[Exercise]] = None

    def _get_catalog(self) -> List[Exercise]:
        if self._catalog is None:
            self._catalog = self._repo.find_all(ExerciseFilters(limit=self.CATALOG_LIMIT))
        return self._catalog

    def clear_catalog_cache(self) -> None:
        self._catalog = None

    # -------------------------------------------------------------------------
    # ExerciseNameResolver Interface
    # -------------------------------------------------------------------------

    def resolve(self, draft: WorkoutDraft, user_id: Optional[str] = None) -> WorkoutDraft:
        resolved: Dict[str, ExerciseResolution] = {}
        blocks = []
        for block in draft.blocks:
            exercises = []
            for exercise in block.exercises:
                if exercise.is_resolved:
                    exercises.append(exercise)
                    continue
                name = (exercise.exercise_name or "").strip()
                if not name:
                    raise ExerciseResolutionError("Exercise has neither an id nor a name")
                if name not in resolved:
                    resolved[name] = self.resolve_name(name)
                exercises.append(
                    exercise.model_copy(update={"exercise_id": resolved[name].exercise_id})
                )
            blocks.append(block.model_copy(update={"exercises": exercises}))

        if resolved:
            methods = {name: r.method.value for name, r in resolved.items()}
            logger.info(f"Resolved {len(resolved)} exercise name(s) for user {user_id}: {methods}")
        return draft.model_copy(update={"blocks": blocks})

    def resolve_name(self, name: str) -> ExerciseResolution:
        """
        Resolve a single exercise name to a catalog id.

        Raises:
            ExerciseResolutionError: If no stage finds a match
        """
        cached_id = self._cache.get(name)
        if cached_id:
            return ExerciseResolution(name, cached_id, ResolutionMethod.CACHE)

        resolution = (
            self._try_exact_match(name)
            or self._try_slug_match(name)
            or self._try_fuzzy_match(name)
            or self._try_llm_match(name)
        )
        if resolution is None:
            raise ExerciseResolutionError(
                f'No exercise found matching: "{name}"', exercise_name=name
            )

        self._cache.set(name, resolution.exercise_id)
        return resolution

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _try_exact_match(self, name: str) -> Optional[ExerciseResolution]:
        exercise = self._repo.find_by_name(name)
        if exercise is None:
            return None
        return ExerciseResolution(name, exercise.id, ResolutionMethod.EXACT)

    def _try_slug_match(self, name: str) -> Optional[ExerciseResolution]:
        slug = normalize_for_slug(name)
        if not slug:
            return None
        exercise = self._repo.find_by_slug(slug)
        if exercise is None:
            return None
        return ExerciseResolution(name, exercise.id, ResolutionMethod.SLUG)

    def _try_fuzzy_match(self, name: str) -> Optional[ExerciseResolution]:
        matches = self.search(name, limit=1)
        if not matches:
            return None
        exercise, score = matches[0]
        if score < self.FUZZY_AUTO_ACCEPT:
            logger.debug(f"Best fuzzy match for {name!r} is {exercise.name!r} ({score:.2f}); below threshold")
            return None
        return ExerciseResolution(name, exercise.id, ResolutionMethod.FUZZY, confidence=score)

    def _try_llm_match(self, name: str) -> Optional[ExerciseResolution]:
        if not self._enable_llm_fallback or self._gateway is None:
            return None

        catalog_ids = {e.id for e in self._get_catalog()}

        def handle_tool(tool_name: str, tool_input: Dict[str, Any]) -> ToolOutcome:
            if tool_name == SEARCH_TOOL.name:
                limit = int(tool_input.get("limit") or 10)
                results = self.search(str(tool_input.get("query", "")), limit=limit)
                return Continue(
                    result={
                        "results": [
                            {
                                "id": exercise.id,
                                "name": exercise.name,
                                "category": exercise.category,
                                "equipment": exercise.equipment,
                                "primaryMuscles": exercise.primary_muscles,
                                "score": round(score, 3),
                            }
                            for exercise, score in results
                        ],
                        "count": len(results),
                    }
                )
            if tool_name == SELECT_TOOL.name:
                exercise_id = str(tool_input.get("exercise_id", ""))
                if exercise_id in catalog_ids:
                    return Stop(value=exercise_id)
                return Continue(result={"error": f"Unknown exercise id: {exercise_id}"}, is_error=True)
            return Continue(result={"error": f"Unknown tool: {tool_name}"}, is_error=True)

        try:
            response = self._gateway.call_with_tools(
                RESOLVER_SYSTEM_PROMPT,
                f'Fuzzy search for "{name}" found no confident match. '
                f"Find the best matching exercise using other search strategies.",
                [SEARCH_TOOL, SELECT_TOOL],
                handle_tool,
                ModelTier.FAST,
                require_tool=True,
            )
        except LLMCallError as e:
            logger.warning(f"LLM exercise resolution failed for {name!r}: {e.message}")
            return None

        exercise_id = response.content
        if not isinstance(exercise_id, str) or exercise_id not in catalog_ids:
            return None
        return ExerciseResolution(name, exercise_id, ResolutionMethod.LLM, confidence=0.8)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, query: str, limit: int = 10) -> List[Tuple[Exercise, float]]:
        """
        Fuzzy search the catalog by name and aliases.

        Returns:
            (exercise, score in 0..1) pairs, best first
        """
        normalized_query = normalize(query)
        if not normalized_query:
            return []

        scored: List[Tuple[Exercise, float, float]] = []
        for exercise in self._get_catalog():
            best_score = 0.0
            best_ratio = 0.0
            for candidate in exercise.all_names:
                normalized_candidate = normalize(candidate)
                # token_set_ratio for flexible matching, plain ratio breaks ties
                score = fuzz.token_set_ratio(normalized_query, normalized_candidate) / 100.0
                ratio = fuzz.ratio(normalized_query, normalized_candidate) / 100.0
                if (score, ratio) > (best_score, best_ratio):
                    best_score, best_ratio = score, ratio
            scored.append((exercise, best_score, best_ratio))

        scored.sort(key=lambda item: (item[1], item[2]), reverse=True)
        return [(exercise, score) for exercise, score, _ in scored[:limit] if score > 0]
