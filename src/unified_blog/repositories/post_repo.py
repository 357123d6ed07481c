"""Data access helpers for working with local posts."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from unified_blog.models.post import CustomPost
from unified_blog.schemas.common import SortField, SortOrder

__all__ = ["PostRepository"]

_SORT_COLUMNS = {
    "id": CustomPost.id,
    "title": CustomPost.title,
    "body": CustomPost.body,
}


class PostRepository:
    """Thin wrapper around database access for local post documents."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> CustomPost | None:
        """Return a post by identifier."""
        return self.session.get(CustomPost, post_id, populate_existing=True)

    def list_all(self) -> list[CustomPost]:
        """Return all posts in natural (id ascending) order."""
        result = self.session.execute(select(CustomPost).order_by(CustomPost.id))
        return list(result.scalars())

    def list_sorted(self, field: SortField, order: SortOrder) -> list[CustomPost]:
        """Return all posts sorted by the store on ``field``."""
        column = _SORT_COLUMNS[field]
        ordering = column.asc() if order == "asc" else column.desc()
        result = self.session.execute(select(CustomPost).order_by(ordering))
        return list(result.scalars())

    def list_by_author(self, user_id: int) -> list[CustomPost]:
        """Return posts owned by ``user_id`` in natural order."""
        result = self.session.execute(
            select(CustomPost).where(CustomPost.user_id == user_id).order_by(CustomPost.id)
        )
        return list(result.scalars())

    def list_by_tag(self, tag: str) -> list[CustomPost]:
        """Return posts carrying ``tag``, compared case-insensitively."""
        needle = tag.casefold()
        return [
            post for post in self.list_all()
            if any(t.casefold() == needle for t in post.tags or [])
        ]

    def search(self, query: str) -> list[CustomPost]:
        """Return posts whose title or body contains ``query``, or that carry it as a tag.

        Matching is case-insensitive; title and body match on substrings,
        tags only on equality.
        """
        needle = query.casefold()
        return [
            post for post in self.list_all()
            if needle in post.title.casefold()
            or needle in post.body.casefold()
            or any(t.casefold() == needle for t in post.tags or [])
        ]

    def list_tags(self) -> list[str]:
        """Return every tag used by a local post, in first-seen order."""
        result = self.session.execute(select(CustomPost.tags).order_by(CustomPost.id))
        seen: dict[str, None] = {}
        for tags in result.scalars():
            for tag in tags or []:
                if isinstance(tag, str) and tag.strip():
                    seen.setdefault(tag.strip(), None)
        return list(seen)

    def max_id(self) -> int | None:
        """Return the highest stored post id, or ``None`` when empty."""
        return self.session.execute(select(func.max(CustomPost.id))).scalar()

    def add(self, post: CustomPost) -> CustomPost:
        """Stage a new post in the session."""
        self.session.add(post)
        return post

    def delete(self, post: CustomPost) -> None:
        """Stage deletion of a post."""
        self.session.delete(post)
