# src/unified_blog/schemas/post.py
"""Post-related Pydantic schemas."""
from __future__ import annotations

from pydantic import Field

from .common import CamelModel, Origin, ReactionKind


class ReactionCounts(CamelModel):
    """Aggregate reaction counters of a post."""

    likes: int = Field(0, ge=0)
    dislikes: int = Field(0, ge=0)


class UserReaction(CamelModel):
    """A single actor's reaction on a local post."""

    user_id: int
    type: ReactionKind


class UnifiedPost(CamelModel):
    """Post from either source, discriminated by ``origin``.

    ``user_reactions`` is only ever populated for ``origin == "local"``;
    remote posts carry a static reaction snapshot.
    """

    id: int
    title: str
    body: str
    tags: list[str] = Field(default_factory=list)
    reactions: ReactionCounts = Field(default_factory=ReactionCounts)
    user_id: int
    origin: Origin
    user_reactions: list[UserReaction] | None = None


class PostView(UnifiedPost):
    """Post annotated with the capabilities of the requesting actor."""

    can_edit: bool = False
    can_delete: bool = False
    can_comment: bool = False
    can_react: bool = False
    user_reaction: ReactionKind | None = None


class PostPage(CamelModel):
    """One page of the unified, sorted post collection."""

    posts: list[PostView]
    total: int


class PostCreate(CamelModel):
    """Schema for creating a new local post."""

    title: str = Field(..., max_length=300)
    body: str = Field(..., max_length=20000)
    tags: list[str] = Field(default_factory=list)


class PostUpdate(CamelModel):
    """Partial update of a local post; omitted fields are left unchanged."""

    title: str | None = Field(None, max_length=300)
    body: str | None = Field(None, max_length=20000)
    tags: list[str] | None = None
