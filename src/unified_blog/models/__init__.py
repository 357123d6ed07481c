# src/unified_blog/models/__init__.py
"""SQLAlchemy models for locally authored blog content."""

from .comment import CustomComment
from .post import CustomPost

__all__ = [
    "CustomComment",
    "CustomPost",
]
