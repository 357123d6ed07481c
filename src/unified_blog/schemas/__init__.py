# src/unified_blog/schemas/__init__.py
"""Pydantic schemas for the Unified Blog API."""

from .author import Author
from .comment import CommentCreate, CommentUpdate, CommentView, UnifiedComment
from .common import Origin, SortField, SortOrder
from .post import (
    PostCreate,
    PostPage,
    PostUpdate,
    PostView,
    ReactionCounts,
    UnifiedPost,
    UserReaction,
)
from .reaction import CommentLikeResult, PostReactionResult, ReactionCreate
from .tag import UnifiedTag

__all__ = [
    "Author",
    "CommentCreate", "CommentUpdate", "CommentView", "UnifiedComment",
    "Origin", "SortField", "SortOrder",
    "PostCreate", "PostPage", "PostUpdate", "PostView",
    "ReactionCounts", "UnifiedPost", "UserReaction",
    "CommentLikeResult", "PostReactionResult", "ReactionCreate",
    "UnifiedTag",
]
