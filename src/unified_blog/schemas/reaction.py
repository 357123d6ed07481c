# src/unified_blog/schemas/reaction.py
"""Reaction-related Pydantic schemas."""

from pydantic import Field

from .common import CamelModel, ReactionKind


class ReactionCreate(CamelModel):
    """Schema for reacting to a post."""

    type: ReactionKind = Field(..., description="like or dislike")


class PostReactionResult(CamelModel):
    """Post reaction state after a toggle."""

    post_id: int
    likes: int
    dislikes: int
    user_reaction: ReactionKind | None


class CommentLikeResult(CamelModel):
    """Comment like state after a toggle."""

    comment_id: int
    post_id: int
    likes: int
    liked_by_current_user: bool
