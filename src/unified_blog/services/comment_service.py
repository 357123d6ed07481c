"""Service-level helpers for creating, editing and deleting local comments."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from unified_blog.models.comment import CustomComment
from unified_blog.repositories.comment_repo import CommentRepository
from unified_blog.repositories.post_repo import PostRepository
from unified_blog.schemas.comment import CommentCreate, CommentUpdate, CommentView
from unified_blog.services.atomic import insert_with_allocated_id, run_versioned
from unified_blog.services.cache import ViewCache
from unified_blog.services.catalog import CatalogClient
from unified_blog.services.errors import ForbiddenError, NotAuthenticatedError, NotFoundError
from unified_blog.services.id_allocator import (
    is_remote_comment_id,
    is_remote_post_id,
    next_comment_id,
)
from unified_blog.services.permissions import annotate_comment, can_delete, can_edit
from unified_blog.services.post_service import require_text
from unified_blog.services.records import to_local_comment

logger = logging.getLogger(__name__)


def _require_actor(actor_id: int | None) -> int:
    if actor_id is None:
        raise NotAuthenticatedError("Sign in to comment")
    return actor_id


def _load_owned_comment(
    repo: CommentRepository, comment_id: int, actor_id: int, action: str
) -> CustomComment:
    comment = repo.get_by_id(comment_id)
    if comment is None:
        if is_remote_comment_id(comment_id):
            raise ForbiddenError(f"Cannot {action} a catalog comment")
        raise NotFoundError(f"Comment {comment_id} not found")
    check = can_delete if action == "delete" else can_edit
    if not check(to_local_comment(comment), actor_id):
        raise ForbiddenError(f"You can {action} only your own comments")
    return comment


async def create_comment(
    *,
    session: Session,
    catalog: CatalogClient,
    actor_id: int | None,
    post_id: int,
    data: CommentCreate,
    cache: ViewCache | None = None,
) -> CommentView:
    """Create a local comment on any post, remote or local.

    The author's full name is looked up in the catalog and stored with the
    comment.
    """
    author_id = _require_actor(actor_id)
    body = require_text(data.body, "Comment body")
    if not is_remote_post_id(post_id) and PostRepository(session).get_by_id(post_id) is None:
        raise NotFoundError(f"Post {post_id} not found")

    author = await catalog.get_author(author_id)
    repo = CommentRepository(session)
    comment = insert_with_allocated_id(
        session,
        lambda: next_comment_id(repo),
        lambda new_id: CustomComment(
            id=new_id,
            post_id=post_id,
            body=body,
            likes=0,
            liked_by=[],
            user_id=author_id,
            user_full_name=author.full_name,
        ),
    )
    logger.info("Actor %s commented %s on post %s", author_id, comment.id, post_id)
    if cache is not None:
        cache.invalidate(f"comments:{post_id}")
    return annotate_comment(to_local_comment(comment), author_id)


async def update_comment(
    *,
    session: Session,
    actor_id: int | None,
    comment_id: int,
    data: CommentUpdate,
    cache: ViewCache | None = None,
) -> CommentView:
    """Replace the body of a local comment owned by ``actor_id``."""
    author_id = _require_actor(actor_id)
    body = require_text(data.body, "Comment body")
    repo = CommentRepository(session)

    def _apply() -> CustomComment:
        comment = _load_owned_comment(repo, comment_id, author_id, "edit")
        comment.body = body
        return comment

    comment = run_versioned(session, _apply)
    logger.info("Actor %s updated comment %s", author_id, comment_id)
    if cache is not None:
        cache.invalidate(f"comments:{comment.post_id}")
    return annotate_comment(to_local_comment(comment), author_id)


async def delete_comment(
    *,
    session: Session,
    actor_id: int | None,
    comment_id: int,
    cache: ViewCache | None = None,
) -> dict[str, int | bool]:
    """Delete a local comment owned by ``actor_id``."""
    author_id = _require_actor(actor_id)
    repo = CommentRepository(session)

    def _apply() -> int:
        comment = _load_owned_comment(repo, comment_id, author_id, "delete")
        post_id = comment.post_id
        repo.delete(comment)
        return post_id

    post_id = run_versioned(session, _apply)
    logger.info("Actor %s deleted comment %s", author_id, comment_id)
    if cache is not None:
        cache.invalidate(f"comments:{post_id}")
    return {"ok": True, "id": comment_id, "postId": post_id}
