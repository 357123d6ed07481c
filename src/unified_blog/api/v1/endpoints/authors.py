"""Author endpoints backed by the remote catalog."""

from fastapi import APIRouter

from unified_blog.schemas.author import Author
from unified_blog.schemas.post import PostView

from ..dependencies import ActorDep, EngineDep

router = APIRouter(prefix="/authors", tags=["authors"])


@router.get("/", response_model=list[Author])
async def list_authors(engine: EngineDep) -> list[Author]:
    """List catalog authors that have posts."""
    return await engine.list_authors()


@router.get("/{author_id}", response_model=Author)
async def get_author(author_id: int, engine: EngineDep) -> Author:
    return await engine.get_author(author_id)


@router.get("/{author_id}/posts", response_model=list[PostView])
async def list_author_posts(author_id: int, engine: EngineDep, actor_id: ActorDep) -> list[PostView]:
    """List the author's catalog posts followed by their local posts."""
    return await engine.list_by_author(author_id, actor_id)
