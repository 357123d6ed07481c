"""Service-level helpers for creating, editing and deleting local posts."""
from __future__ import annotations

import logging
import re

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from unified_blog.models.post import CustomPost
from unified_blog.repositories.comment_repo import CommentRepository
from unified_blog.repositories.post_repo import PostRepository
from unified_blog.schemas.post import PostCreate, PostUpdate, PostView
from unified_blog.services.atomic import insert_with_allocated_id, run_versioned
from unified_blog.services.cache import ViewCache
from unified_blog.services.errors import (
    ForbiddenError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
)
from unified_blog.services.id_allocator import is_remote_post_id, next_post_id
from unified_blog.services.permissions import annotate_post, can_delete, can_edit
from unified_blog.services.records import to_local_post

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_tags(tags: list[str]) -> list[str]:
    """Trim tags, drop empty ones and join inner words with ``-``."""
    cleaned = (t.strip() for t in tags)
    return [_WHITESPACE.sub("-", t) for t in cleaned if t]


def require_text(value: str, field: str) -> str:
    """Return ``value`` trimmed, rejecting blank input."""
    text = value.strip()
    if not text:
        raise ValidationError(f"{field} cannot be empty")
    return text


def require_actor(actor_id: int | None) -> int:
    if actor_id is None:
        raise NotAuthenticatedError("Sign in to change posts")
    return actor_id


def _load_owned_post(repo: PostRepository, post_id: int, actor_id: int, action: str) -> CustomPost:
    post = repo.get_by_id(post_id)
    if post is None:
        if is_remote_post_id(post_id):
            raise ForbiddenError(f"Cannot {action} a catalog post")
        raise NotFoundError(f"Post {post_id} not found")
    check = can_delete if action == "delete" else can_edit
    if not check(to_local_post(post), actor_id):
        raise ForbiddenError(f"You can {action} only your own posts")
    return post


def _invalidate_post(cache: ViewCache | None, post_id: int, *extra: str) -> None:
    if cache is not None:
        cache.invalidate("posts", "tags", f"post:{post_id}", *extra)


async def create_post(
    *,
    session: Session,
    actor_id: int | None,
    data: PostCreate,
    cache: ViewCache | None = None,
) -> PostView:
    """Create a local post owned by ``actor_id``.

    Returns:
        The stored post with its final id, annotated for the author.

    Raises:
        NotAuthenticatedError: If there is no actor.
        ValidationError: If the title or body is blank.
    """
    owner = require_actor(actor_id)
    title = require_text(data.title, "Title")
    body = require_text(data.body, "Content")
    tags = normalize_tags(data.tags)
    repo = PostRepository(session)

    post = insert_with_allocated_id(
        session,
        lambda: next_post_id(repo),
        lambda new_id: CustomPost(
            id=new_id,
            title=title,
            body=body,
            tags=tags,
            likes=0,
            dislikes=0,
            user_reactions=[],
            user_id=owner,
        ),
    )
    logger.info("Actor %s created post %s", owner, post.id)
    _invalidate_post(cache, post.id)
    return annotate_post(to_local_post(post), owner)


async def update_post(
    *,
    session: Session,
    actor_id: int | None,
    post_id: int,
    data: PostUpdate,
    cache: ViewCache | None = None,
) -> PostView:
    """Apply a partial update to a local post owned by ``actor_id``."""
    owner = require_actor(actor_id)
    title = require_text(data.title, "Title") if data.title is not None else None
    body = require_text(data.body, "Content") if data.body is not None else None
    tags = normalize_tags(data.tags) if data.tags is not None else None
    repo = PostRepository(session)

    def _apply() -> CustomPost:
        post = _load_owned_post(repo, post_id, owner, "edit")
        if title is not None:
            post.title = title
        if body is not None:
            post.body = body
        if tags is not None:
            post.tags = tags
        return post

    post = run_versioned(session, _apply)
    logger.info("Actor %s updated post %s", owner, post_id)
    _invalidate_post(cache, post_id)
    return annotate_post(to_local_post(post), owner)


async def delete_post(
    *,
    session: Session,
    actor_id: int | None,
    post_id: int,
    cache: ViewCache | None = None,
) -> dict[str, int | bool]:
    """Delete a local post, then its local comments on a best-effort basis.

    A failure while removing the comments is logged and does not undo the
    post deletion.
    """
    owner = require_actor(actor_id)
    repo = PostRepository(session)

    def _apply() -> None:
        repo.delete(_load_owned_post(repo, post_id, owner, "delete"))

    run_versioned(session, _apply)
    logger.info("Actor %s deleted post %s", owner, post_id)

    try:
        removed = CommentRepository(session).delete_for_post(post_id)
        session.commit()
        logger.info("Removed %d comments of deleted post %s", removed, post_id)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Could not remove comments of deleted post %s: %s", post_id, exc)

    _invalidate_post(cache, post_id, f"comments:{post_id}")
    return {"ok": True, "id": post_id}
