# src/unified_blog/api/v1/endpoints/comments.py
"""Comment-related endpoints for the Unified Blog API."""

from fastapi import APIRouter

from unified_blog.schemas.comment import CommentUpdate, CommentView
from unified_blog.schemas.reaction import CommentLikeResult
from unified_blog.services import comment_service, reactions

from ..dependencies import ActorDep, CacheDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.patch("/{comment_id}", response_model=CommentView)
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: SessionDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> CommentView:
    """Edit a local comment owned by the caller."""
    return await comment_service.update_comment(
        session=db, actor_id=actor_id, comment_id=comment_id, data=data, cache=cache
    )


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    db: SessionDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> dict[str, int | bool]:
    """Delete a local comment owned by the caller."""
    return await comment_service.delete_comment(
        session=db, actor_id=actor_id, comment_id=comment_id, cache=cache
    )


@router.post("/{comment_id}/like", response_model=CommentLikeResult)
async def like_comment(
    comment_id: int,
    db: SessionDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> CommentLikeResult:
    """Toggle the caller's like on a local comment."""
    return reactions.like_comment(db, comment_id, actor_id, cache=cache)
