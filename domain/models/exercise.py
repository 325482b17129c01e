"""
Exercise catalog entity.

Catalog exercises are independent of any workout. Exercise instances refer to
them by id only.
"""

from typing import List, Optional

from pydantic import Field

from domain.models.base import CamelModel, new_id


class Exercise(CamelModel):
    """A canonical exercise in the catalog (e.g. "Barbell Bench Press")."""

    id: str = Field(default_factory=new_id, description="Catalog id")
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    slug: str = Field(..., min_length=1, description="URL-safe unique slug")
    category: Optional[str] = Field(default=None, description="e.g. 'chest', 'legs'")
    equipment: List[str] = Field(default_factory=list)
    primary_muscles: List[str] = Field(default_factory=list)
    aliases: List[str] = Field(default_factory=list, description="Alternate names")
    tags: List[str] = Field(default_factory=list)

    @property
    def all_names(self) -> List[str]:
        """Name followed by aliases, for matching."""
        return [self.name, *self.aliases]
