# src/unified_blog/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import authors_router, comments_router, posts_router, tags_router

__all__ = [
    "authors_router",
    "comments_router",
    "posts_router",
    "tags_router",
]
