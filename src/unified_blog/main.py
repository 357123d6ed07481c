# src/unified_blog/main.py
"""Main entry point for the Unified Blog application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from unified_blog.api.v1 import authors_router, comments_router, posts_router, tags_router
from unified_blog.core.settings import settings
from unified_blog.services.catalog import get_catalog_client
from unified_blog.services.errors import (
    BlogError,
    ForbiddenError,
    NotAuthenticatedError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
    WriteConflictError,
)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Unified Blog API",
    description="Catalog and locally authored posts behind one API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(authors_router, prefix="/api/v1")
app.include_router(tags_router, prefix="/api/v1")

_ERROR_STATUS: dict[type[BlogError], int] = {
    NotAuthenticatedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_422_UNPROCESSABLE_CONTENT,
    WriteConflictError: status.HTTP_409_CONFLICT,
    UpstreamUnavailableError: status.HTTP_502_BAD_GATEWAY,
}


@app.exception_handler(BlogError)
async def handle_blog_error(request: Request, exc: BlogError) -> JSONResponse:
    """Translate domain errors into JSON error responses."""
    status_code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_catalog_client().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Unified Blog API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    uvicorn.run("unified_blog.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
