"""
Shared base model and helpers for the workout domain.

Domain models use snake_case attributes in Python and camelCase keys on the
wire (LLM prompts, persisted JSON), so every model is populated by either name.
"""

import uuid
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a fresh entity id (UUID4 string)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Timezone-aware current time used for lastModifiedTime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serializing to camelCase keys when dumped with by_alias=True."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Dump to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def describe_validation_error(error: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into "path: message" strings."""
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    ]
