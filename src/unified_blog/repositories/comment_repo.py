"""Data access helpers for working with local comments."""
from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from unified_blog.models.comment import CustomComment

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for local comment documents."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, comment_id: int) -> CustomComment | None:
        """Return a comment by identifier."""
        return self.session.get(CustomComment, comment_id, populate_existing=True)

    def list_for_post(self, post_id: int) -> list[CustomComment]:
        """Return comments on ``post_id`` sorted by ascending id."""
        result = self.session.execute(
            select(CustomComment)
            .where(CustomComment.post_id == post_id)
            .order_by(CustomComment.id)
        )
        return list(result.scalars())

    def max_id(self) -> int | None:
        return self.session.execute(select(func.max(CustomComment.id))).scalar()

    def add(self, comment: CustomComment) -> CustomComment:
        self.session.add(comment)
        return comment

    def delete(self, comment: CustomComment) -> None:
        self.session.delete(comment)

    def delete_for_post(self, post_id: int) -> int:
        """Delete every comment on ``post_id`` and return how many were removed."""
        result = self.session.execute(
            delete(CustomComment).where(CustomComment.post_id == post_id)
        )
        return result.rowcount or 0
