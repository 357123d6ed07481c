"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from unified_blog.core.security import InvalidTokenError, decode_actor_id
from unified_blog.db.session import get_db
from unified_blog.services.cache import ViewCache, get_view_cache
from unified_blog.services.catalog import CatalogClient, get_catalog_client
from unified_blog.services.unification import UnificationEngine

# Anonymous callers may read, so a missing token is not an error here.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_actor_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> int | None:
    """Return the authenticated actor id, or ``None`` for anonymous callers.

    Raises:
        HTTPException: If a token is present but invalid.
    """
    if credentials is None:
        return None
    try:
        return decode_actor_id(credentials.credentials)
    except InvalidTokenError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


def get_catalog_dep() -> CatalogClient:
    """Return the shared catalog client."""
    return get_catalog_client()


def get_cache_dep() -> ViewCache:
    """Return the shared view cache."""
    return get_view_cache()


ActorDep = Annotated[int | None, Depends(get_current_actor_id)]
CatalogDep = Annotated[CatalogClient, Depends(get_catalog_dep)]
CacheDep = Annotated[ViewCache, Depends(get_cache_dep)]


def get_engine(db: SessionDep, catalog: CatalogDep, cache: CacheDep) -> UnificationEngine:
    """Build a unification engine bound to the request session."""
    return UnificationEngine(db, catalog, cache)


EngineDep = Annotated[UnificationEngine, Depends(get_engine)]
