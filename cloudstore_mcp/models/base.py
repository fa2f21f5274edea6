"""Shared pydantic base for wire-facing models.

Tool arguments and results use camelCase on the wire (``fileId``,
``totalResults``); Python code uses snake_case attributes.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that serializes field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-safe dict with camelCase keys and no null fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
