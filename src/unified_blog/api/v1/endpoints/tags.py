"""Tag endpoints."""

from fastapi import APIRouter

from unified_blog.schemas.tag import UnifiedTag

from ..dependencies import EngineDep

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=list[UnifiedTag])
async def list_tags(engine: EngineDep) -> list[UnifiedTag]:
    """List catalog and local tags without case-insensitive duplicates."""
    return await engine.list_tags()
