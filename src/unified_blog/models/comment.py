# src/unified_blog/models/comment.py
"""SQLAlchemy model for locally authored comments."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from unified_blog.db.session import Base
from unified_blog.db.time import utcnow


class CustomComment(Base):
    """Comment created through this service.

    Comment ids come from one global counter and are not scoped by post.
    ``post_id`` may reference either a remote or a local post, so it carries
    no foreign key.
    """

    __tablename__ = "custom_comment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    post_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    liked_by: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    # Denormalized for display without a catalog round trip.
    user_full_name: Mapped[str] = mapped_column(Text, nullable=False)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __mapper_args__ = {"version_id_col": version_id}
