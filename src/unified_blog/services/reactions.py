"""Like/dislike toggles for local posts and likes for local comments.

The toggle rules are pure functions over the stored reaction state; the
service functions wrap them in a versioned read-modify-persist step so that
counters and per-actor entries are written together in one row update.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from unified_blog.repositories.comment_repo import CommentRepository
from unified_blog.repositories.post_repo import PostRepository
from unified_blog.schemas.common import ReactionKind
from unified_blog.schemas.reaction import CommentLikeResult, PostReactionResult
from unified_blog.services.atomic import run_versioned
from unified_blog.services.cache import ViewCache
from unified_blog.services.errors import ForbiddenError, NotAuthenticatedError, NotFoundError
from unified_blog.services.id_allocator import is_remote_comment_id, is_remote_post_id
from unified_blog.services.records import normalize_liked_by, normalize_user_reactions

logger = logging.getLogger(__name__)


def toggle_reaction(
    user_reactions: list | None,
    actor_id: int,
    kind: ReactionKind,
) -> tuple[list[dict], ReactionKind | None]:
    """Apply one reaction click and return ``(entries, resulting reaction)``.

    No entry adds one, the same kind removes it, the opposite kind switches it.
    """
    entries = normalize_user_reactions(user_reactions)
    existing = next((e for e in entries if e["userId"] == actor_id), None)

    if existing is None:
        entries.append({"userId": actor_id, "type": kind})
        return entries, kind
    if existing["type"] == kind:
        entries.remove(existing)
        return entries, None
    existing["type"] = kind
    return entries, kind


def count_reactions(entries: list[dict]) -> tuple[int, int]:
    """Return ``(likes, dislikes)`` for normalized reaction entries."""
    likes = sum(1 for e in entries if e["type"] == "like")
    return likes, len(entries) - likes


def toggle_like(liked_by: list | None, actor_id: int) -> tuple[list[int], bool]:
    """Add or remove ``actor_id`` from ``liked_by``; return ``(likers, now_liked)``."""
    likers = normalize_liked_by(liked_by)
    if actor_id in likers:
        likers.remove(actor_id)
        return likers, False
    likers.append(actor_id)
    return likers, True


def react_to_post(
    session: Session,
    post_id: int,
    actor_id: int | None,
    kind: ReactionKind,
    *,
    cache: ViewCache | None = None,
) -> PostReactionResult:
    """Toggle ``actor_id``'s ``kind`` reaction on a local post.

    Raises:
        NotAuthenticatedError: If there is no actor.
        ForbiddenError: If the post belongs to the remote catalog.
        NotFoundError: If no local post has this id.
    """
    if actor_id is None:
        raise NotAuthenticatedError("Sign in to react to posts")
    repo = PostRepository(session)

    def _apply() -> PostReactionResult:
        post = repo.get_by_id(post_id)
        if post is None:
            if is_remote_post_id(post_id):
                raise ForbiddenError("Cannot react to a catalog post")
            raise NotFoundError(f"Post {post_id} not found")

        entries, user_reaction = toggle_reaction(post.user_reactions, actor_id, kind)
        likes, dislikes = count_reactions(entries)
        post.user_reactions = entries
        post.likes = likes
        post.dislikes = dislikes
        return PostReactionResult(
            post_id=post_id,
            likes=likes,
            dislikes=dislikes,
            user_reaction=user_reaction,
        )

    result = run_versioned(session, _apply)
    logger.info(
        "Actor %s reacted %s on post %s -> %s", actor_id, kind, post_id, result.user_reaction
    )
    if cache is not None:
        cache.invalidate("posts", f"post:{post_id}")
    return result


def like_comment(
    session: Session,
    comment_id: int,
    actor_id: int | None,
    *,
    cache: ViewCache | None = None,
) -> CommentLikeResult:
    """Toggle ``actor_id``'s like on a local comment."""
    if actor_id is None:
        raise NotAuthenticatedError("Sign in to like comments")
    repo = CommentRepository(session)

    def _apply() -> CommentLikeResult:
        comment = repo.get_by_id(comment_id)
        if comment is None:
            if is_remote_comment_id(comment_id):
                raise ForbiddenError("Cannot like a catalog comment")
            raise NotFoundError(f"Comment {comment_id} not found")

        likers, liked = toggle_like(comment.liked_by, actor_id)
        comment.liked_by = likers
        comment.likes = len(likers)
        return CommentLikeResult(
            comment_id=comment_id,
            post_id=comment.post_id,
            likes=len(likers),
            liked_by_current_user=liked,
        )

    result = run_versioned(session, _apply)
    logger.info("Actor %s toggled like on comment %s -> %s", actor_id, comment_id, result.liked_by_current_user)
    if cache is not None:
        cache.invalidate(f"comments:{result.post_id}")
    return result
