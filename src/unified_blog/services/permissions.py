"""Capability flags for a record and the actor looking at it.

Everything here is pure: the functions read the record snapshot and the actor
id only, and never touch storage.
"""
from __future__ import annotations

from typing import Any

from unified_blog.schemas.comment import CommentView, UnifiedComment
from unified_blog.schemas.common import ReactionKind
from unified_blog.schemas.post import PostView, UnifiedPost


def coerce_actor_id(value: Any) -> int | None:
    """Return ``value`` as an int actor id, or ``None`` if it is not numeric.

    Older documents stored actor ids as strings, so every comparison goes
    through this first.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def can_edit(record: UnifiedPost | UnifiedComment, actor_id: int | None) -> bool:
    """Return True when ``actor_id`` owns the local ``record``."""
    if actor_id is None or record.origin != "local":
        return False
    return coerce_actor_id(record.user_id) == actor_id


def can_delete(record: UnifiedPost | UnifiedComment, actor_id: int | None) -> bool:
    return can_edit(record, actor_id)


def can_comment(actor_id: int | None) -> bool:
    """Any authenticated actor may comment on any post."""
    return actor_id is not None


def can_react(record: UnifiedPost | UnifiedComment) -> bool:
    """Only local records accept reactions; ownership does not matter."""
    return record.origin == "local"


def current_reaction(post: UnifiedPost, actor_id: int | None) -> ReactionKind | None:
    """Return the actor's reaction on a local post, if any."""
    if actor_id is None or post.origin != "local":
        return None
    for entry in post.user_reactions or []:
        if coerce_actor_id(entry.user_id) == actor_id:
            return entry.type
    return None


def annotate_post(post: UnifiedPost, actor_id: int | None) -> PostView:
    """Return ``post`` with the actor's capability flags attached."""
    return PostView(
        **post.model_dump(),
        can_edit=can_edit(post, actor_id),
        can_delete=can_delete(post, actor_id),
        can_comment=can_comment(actor_id),
        can_react=can_react(post),
        user_reaction=current_reaction(post, actor_id),
    )


def annotate_comment(comment: UnifiedComment, actor_id: int | None) -> CommentView:
    """Return ``comment`` with the actor's capability flags attached."""
    liked = (
        actor_id is not None
        and comment.origin == "local"
        and actor_id in {coerce_actor_id(v) for v in comment.liked_by or []}
    )
    return CommentView(
        **comment.model_dump(),
        can_edit=can_edit(comment, actor_id),
        can_delete=can_delete(comment, actor_id),
        can_like=can_react(comment),
        liked_by_current_user=liked,
    )
