# src/unified_blog/models/post.py
"""SQLAlchemy model for locally authored posts."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from unified_blog.db.session import Base
from unified_blog.db.time import utcnow


class CustomPost(Base):
    """Post created through this service.

    Ids continue after the last remote catalog id, so every row here has
    ``id >= 252``. Reaction counters live next to the per-actor reaction list
    so that both are written in one row update.
    """

    __tablename__ = "custom_post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # [{"userId": int, "type": "like" | "dislike"}], at most one entry per actor.
    user_reactions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    # Catalog author id of the owner.
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __mapper_args__ = {"version_id_col": version_id}
