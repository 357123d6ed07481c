"""Shared Pydantic schemas and literal types."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Origin = Literal["remote", "local"]
SortField = Literal["id", "title", "body"]
SortOrder = Literal["asc", "desc"]
ReactionKind = Literal["like", "dislike"]


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
