"""Conversion of local store rows into unified records."""
from __future__ import annotations

from unified_blog.models.comment import CustomComment
from unified_blog.models.post import CustomPost
from unified_blog.schemas.comment import UnifiedComment
from unified_blog.schemas.post import UnifiedPost, UserReaction
from unified_blog.services.permissions import coerce_actor_id


def normalize_user_reactions(raw: list | None) -> list[dict]:
    """Return stored reaction entries with numeric ids, one entry per actor.

    Entries with a non-numeric id or an unknown type are dropped; for
    duplicates of one actor the first entry wins.
    """
    entries: list[dict] = []
    seen: set[int] = set()
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        user_id = coerce_actor_id(item.get("userId"))
        kind = item.get("type")
        if user_id is None or kind not in ("like", "dislike") or user_id in seen:
            continue
        seen.add(user_id)
        entries.append({"userId": user_id, "type": kind})
    return entries


def normalize_liked_by(raw: list | None) -> list[int]:
    """Return stored liker ids as unique ints, preserving order."""
    liked_by: list[int] = []
    for value in raw or []:
        actor = coerce_actor_id(value)
        if actor is not None and actor not in liked_by:
            liked_by.append(actor)
    return liked_by


def to_local_post(post: CustomPost) -> UnifiedPost:
    return UnifiedPost(
        id=post.id,
        title=post.title,
        body=post.body,
        tags=list(post.tags or []),
        reactions={"likes": max(0, post.likes or 0), "dislikes": max(0, post.dislikes or 0)},
        user_id=post.user_id,
        origin="local",
        user_reactions=[
            UserReaction(user_id=e["userId"], type=e["type"])
            for e in normalize_user_reactions(post.user_reactions)
        ],
    )


def to_local_comment(comment: CustomComment) -> UnifiedComment:
    return UnifiedComment(
        id=comment.id,
        post_id=comment.post_id,
        body=comment.body,
        likes=max(0, comment.likes or 0),
        user_id=comment.user_id,
        user_full_name=comment.user_full_name,
        origin="local",
        liked_by=normalize_liked_by(comment.liked_by),
    )
