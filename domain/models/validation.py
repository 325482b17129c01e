"""
Classification result for the workout-content gate. Ephemeral, never persisted.
"""

from typing import Optional

from pydantic import Field

from domain.models.base import CamelModel


class ValidationResult(CamelModel):
    """Classifier verdict: is this text workout content at all?"""

    is_workout: bool = Field(..., description="Whether the text describes a workout")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Classifier confidence")
    reason: Optional[str] = Field(default=None, description="Short explanation")

    def is_confident(self, threshold: float) -> bool:
        return self.confidence >= threshold
