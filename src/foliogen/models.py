"""Shared pydantic base for models serialized into manifest JSON."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON form uses the camelCase keys the widgets read."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_json_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping written to manifest files."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["CamelModel"]
