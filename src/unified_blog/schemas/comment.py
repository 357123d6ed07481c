# src/unified_blog/schemas/comment.py
"""Comment-related Pydantic schemas."""
from __future__ import annotations

from pydantic import Field

from .common import CamelModel, Origin


class UnifiedComment(CamelModel):
    """Comment from either source, discriminated by ``origin``."""

    id: int
    post_id: int
    body: str
    likes: int = Field(0, ge=0)
    user_id: int
    user_full_name: str
    username: str | None = None
    origin: Origin
    liked_by: list[int] | None = None


class CommentView(UnifiedComment):
    """Comment annotated with the capabilities of the requesting actor."""

    can_edit: bool = False
    can_delete: bool = False
    can_like: bool = False
    liked_by_current_user: bool = False


class CommentCreate(CamelModel):
    """Schema for creating a new local comment."""

    body: str = Field(..., max_length=5000)


class CommentUpdate(CamelModel):
    """Schema for editing a local comment."""

    body: str = Field(..., max_length=5000)
