"""
Input sanitization for workout text.

User text is interpolated verbatim between XML-like delimiter tags in every
downstream prompt (<text>, <original_text>, <parsed_workout>, ...). This
sanitizer is the only defense against the text hijacking the model's
instructions, so rejection is immediate and terminal for the request.

Accepted text is returned unchanged.
"""

import logging
import re
from typing import List, Pattern

from application.exceptions import InvalidInput

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 10000

# Delimiter tags used by the pipeline's own prompts
PROMPT_DELIMITER_TAGS = (
    "text",
    "workout_text",
    "original_text",
    "parsed_workout",
    "identified_issues",
    "schema_errors",
    "instructions",
    "output",
    "example",
)

INJECTION_PATTERNS: List[Pattern[str]] = [
    # Direct instruction override
    re.compile(r"ignore\s+(all\s+)?previous\s+(instructions|directives|commands)", re.IGNORECASE),
    re.compile(r"disregard\s+(all\s+)?(previous|prior)\s+(instructions|directives)", re.IGNORECASE),
    re.compile(r"new\s+instructions?:", re.IGNORECASE),
    # System / role override
    re.compile(r"system\s+prompt", re.IGNORECASE),
    re.compile(r"admin\s+mode", re.IGNORECASE),
    re.compile(
        r"(you\s+are|your\s+role\s+is)\s+now\s+(a|an)\s+\w+\s+(admin|assistant|helper)",
        re.IGNORECASE,
    ),
    # Job redefinition
    re.compile(r"your\s+job\s+is\s+now\s+to\s+(?!focus|maintain|ensure|complete)", re.IGNORECASE),
    # Delimiter injection
    re.compile(r"</(" + "|".join(PROMPT_DELIMITER_TAGS) + r")>", re.IGNORECASE),
    re.compile(r"</\w+>\s*</\w+>", re.IGNORECASE),
]


class InputSanitizer:
    """
    Validates raw workout text before it reaches any prompt.

    Usage:
        sanitizer = InputSanitizer(max_length=10000)
        text = sanitizer.sanitize(raw_text)  # raises InvalidInput on rejection
    """

    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH):
        self._max_length = max_length

    def sanitize(self, text: str) -> str:
        """
        Validate workout text.

        Args:
            text: Raw user text

        Returns:
            The same text, unchanged

        Raises:
            InvalidInput: Empty, too long, or matches an injection signature
        """
        if text is None or not text.strip():
            raise InvalidInput("Workout text cannot be empty")

        if len(text) > self._max_length:
            raise InvalidInput(
                f"Workout text too long (max {self._max_length} characters)"
            )

        for pattern in INJECTION_PATTERNS:
            if pattern.search(text):
                logger.warning(
                    f"Rejected workout text matching injection signature: {pattern.pattern}"
                )
                raise InvalidInput("Workout text contains prohibited content")

        return text

    def is_safe(self, text: str) -> bool:
        """Check text without raising."""
        try:
            self.sanitize(text)
        except InvalidInput:
            return False
        return True
