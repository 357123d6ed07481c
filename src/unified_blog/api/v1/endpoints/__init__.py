"""API endpoint modules for version 1."""

from .authors import router as authors_router
from .comments import router as comments_router
from .posts import router as posts_router
from .tags import router as tags_router

__all__ = [
    "authors_router",
    "comments_router",
    "posts_router",
    "tags_router",
]
