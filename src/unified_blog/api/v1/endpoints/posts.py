# src/unified_blog/api/v1/endpoints/posts.py
"""Post-related endpoints for the Unified Blog API."""

from fastapi import APIRouter, HTTPException, Query, status

from unified_blog.schemas.comment import CommentCreate, CommentView
from unified_blog.schemas.common import SortField, SortOrder
from unified_blog.schemas.post import PostCreate, PostPage, PostUpdate, PostView
from unified_blog.schemas.reaction import PostReactionResult, ReactionCreate
from unified_blog.services import comment_service, post_service, reactions

from ..dependencies import ActorDep, CacheDep, CatalogDep, EngineDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=PostPage)
async def list_posts(
    engine: EngineDep,
    actor_id: ActorDep,
    field: str = Query("id", description="Sort field: id, title or body"),
    order: str = Query("desc", description="Sort order: asc or desc"),
    page: int = Query(1, description="1-based page number"),
    per_page: int | None = Query(None, alias="perPage", description="Posts per page"),
) -> PostPage:
    """List one page of catalog and local posts in a single sorted order."""
    return await engine.sort_posts(field, order, page, per_page, actor_id=actor_id)


@router.get("/search", response_model=PostPage)
async def search_posts(
    engine: EngineDep,
    actor_id: ActorDep,
    q: str = Query("", description="Text or tag to search for"),
    field: SortField = Query("id"),
    order: SortOrder = Query("desc"),
) -> PostPage:
    """Search both sources by text and tag; results are not paginated."""
    return await engine.search(q, field, order, actor_id=actor_id)


@router.get("/tag/{slug}", response_model=PostPage)
async def list_posts_by_tag(
    slug: str,
    engine: EngineDep,
    actor_id: ActorDep,
    field: SortField = Query("id"),
    order: SortOrder = Query("desc"),
) -> PostPage:
    """List every post carrying the tag ``slug``."""
    return await engine.search_by_tag(slug, field, order, actor_id=actor_id)


@router.get("/{post_id}", response_model=PostView)
async def get_post(post_id: int, engine: EngineDep, actor_id: ActorDep) -> PostView:
    """Get a specific post by ID."""
    post = await engine.get_by_id(post_id, actor_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.post("/", response_model=PostView, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    db: SessionDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> PostView:
    """Create a local post owned by the caller."""
    return await post_service.create_post(session=db, actor_id=actor_id, data=data, cache=cache)


@router.patch("/{post_id}", response_model=PostView)
async def update_post(
    post_id: int,
    data: PostUpdate,
    db: SessionDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> PostView:
    """Edit a local post owned by the caller."""
    return await post_service.update_post(
        session=db, actor_id=actor_id, post_id=post_id, data=data, cache=cache
    )


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    db: SessionDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> dict[str, int | bool]:
    """Delete a local post owned by the caller, with its local comments."""
    return await post_service.delete_post(
        session=db, actor_id=actor_id, post_id=post_id, cache=cache
    )


@router.post("/{post_id}/reactions", response_model=PostReactionResult)
async def react_to_post(
    post_id: int,
    data: ReactionCreate,
    db: SessionDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> PostReactionResult:
    """Toggle the caller's like or dislike on a local post."""
    return reactions.react_to_post(db, post_id, actor_id, data.type, cache=cache)


@router.get("/{post_id}/comments", response_model=list[CommentView])
async def list_comments(post_id: int, engine: EngineDep, actor_id: ActorDep) -> list[CommentView]:
    """List catalog comments followed by local comments of a post."""
    return await engine.list_comments_for_post(post_id, actor_id)


@router.post(
    "/{post_id}/comments",
    response_model=CommentView,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    data: CommentCreate,
    db: SessionDep,
    catalog: CatalogDep,
    cache: CacheDep,
    actor_id: ActorDep,
) -> CommentView:
    """Comment on any post as the caller."""
    return await comment_service.create_comment(
        session=db,
        catalog=catalog,
        actor_id=actor_id,
        post_id=post_id,
        data=data,
        cache=cache,
    )
