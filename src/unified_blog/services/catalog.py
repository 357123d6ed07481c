"""Client for the read-only remote post catalog.

The catalog serves the fixed "API" content: posts 1..251, their comments,
authors and tags. Every call is bounded by a timeout; transport failures and
server errors surface as :class:`UpstreamUnavailableError`. Reads of immutable
records go through a short-lived cache, listings that depend on query
parameters are always fetched fresh.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from unified_blog.core.settings import settings
from unified_blog.schemas.author import Author
from unified_blog.schemas.comment import UnifiedComment
from unified_blog.schemas.common import SortField, SortOrder
from unified_blog.schemas.post import UnifiedPost
from unified_blog.services.cache import ViewCache, get_view_cache
from unified_blog.services.errors import NotFoundError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404
HTTP_INTERNAL_SERVER_ERROR = 500

# Highest post id served by the catalog; local ids start right after it.
API_POST_COUNT = 251
# Highest comment id served by the catalog.
API_COMMENTS_MAX_ID = 340

# Catalog users that have no posts; hidden from author listings.
USERS_WITH_NO_POSTS = frozenset({
    3, 4, 8, 10, 14, 17, 20, 21, 22, 25, 27, 33, 38, 39, 40, 41, 42, 49, 50, 53,
    64, 68, 71, 75, 78, 85, 86, 96, 100, 103, 109, 111, 117, 119, 123, 129, 137,
    139, 141, 146, 147, 151, 153, 158, 160, 165, 166, 176, 186, 193, 194, 197,
    202,
})

_AUTHOR_DETAIL_FIELDS = "id,firstName,lastName,gender,birthDate,age,email,phone"


@dataclass(frozen=True)
class CatalogConfig:
    """Immutable configuration for catalog access."""

    base_url: str
    timeout_seconds: float
    cache_ttl_seconds: int


def load_catalog_config() -> CatalogConfig:
    """Build configuration object from global settings."""
    return CatalogConfig(
        base_url=settings.catalog_base_url,
        timeout_seconds=float(settings.catalog_timeout_seconds),
        cache_ttl_seconds=settings.catalog_cache_ttl_seconds,
    )


def to_remote_post(payload: Mapping[str, Any]) -> UnifiedPost:
    """Map a catalog post payload onto the unified post shape."""
    reactions = payload.get("reactions") or {}
    return UnifiedPost(
        id=int(payload["id"]),
        title=payload.get("title", ""),
        body=payload.get("body", ""),
        tags=list(payload.get("tags") or []),
        reactions={
            "likes": int(reactions.get("likes", 0)),
            "dislikes": int(reactions.get("dislikes", 0)),
        },
        user_id=int(payload["userId"]),
        origin="remote",
    )


def to_remote_comment(payload: Mapping[str, Any]) -> UnifiedComment:
    """Map a catalog comment payload onto the unified comment shape."""
    user = payload.get("user") or {}
    return UnifiedComment(
        id=int(payload["id"]),
        post_id=int(payload["postId"]),
        body=payload.get("body", ""),
        likes=int(payload.get("likes", 0)),
        user_id=int(user.get("id", 0)),
        user_full_name=user.get("fullName") or user.get("username") or "",
        username=user.get("username"),
        origin="remote",
    )


def to_author(payload: Mapping[str, Any]) -> Author:
    """Map a catalog user payload onto an author with a full name."""
    data = dict(payload)
    data["fullName"] = f"{payload.get('firstName', '')} {payload.get('lastName', '')}"
    return Author.model_validate(data)


class CatalogClient:
    """Async HTTP client for the remote catalog."""

    def __init__(
        self,
        config: CatalogConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: ViewCache | None = None,
    ) -> None:
        self.config = config or load_catalog_config()
        self._transport = transport
        self._cache = cache
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def cache(self) -> ViewCache:
        if self._cache is None:
            self._cache = get_view_cache()
        return self._cache

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, params: Mapping[str, Any] | None = None) -> httpx.Response:
        client = await self._ensure_client()
        logger.debug("Catalog request GET %s %s", path, dict(params or {}))
        try:
            response = await client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.error("Catalog request GET %s failed: %s", path, exc, exc_info=True)
            raise UpstreamUnavailableError(f"Catalog request failed: {exc}") from exc

        if response.status_code >= HTTP_INTERNAL_SERVER_ERROR:
            logger.error("Catalog responded with %s for GET %s", response.status_code, path)
            raise UpstreamUnavailableError(f"Catalog responded with {response.status_code}")
        return response

    async def _get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        """Return the JSON body of a successful response; any non-2xx is an upstream failure."""
        response = await self._request(path, params)
        if not response.is_success:
            raise UpstreamUnavailableError(
                f"Unexpected catalog response ({response.status_code}) for {path}"
            )
        return response.json()

    async def _cached_json(
        self,
        key: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        missing_ok: bool = False,
    ) -> Any | None:
        """Return a cached JSON body, fetching it on a miss.

        With ``missing_ok`` a 404 yields ``None`` instead of an error.
        """
        cache_key = f"catalog:{key}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Catalog cache hit for %s", cache_key)
            return cached

        response = await self._request(path, params)
        if missing_ok and response.status_code == HTTP_NOT_FOUND:
            return None
        if not response.is_success:
            raise UpstreamUnavailableError(
                f"Unexpected catalog response ({response.status_code}) for {path}"
            )
        payload = response.json()
        self.cache.set(cache_key, payload, tags=("catalog",), ttl=self.config.cache_ttl_seconds)
        return payload

    async def list_all_posts(self) -> list[UnifiedPost]:
        """Return every catalog post in catalog order."""
        data = await self._cached_json("posts", "/posts", {"limit": 0})
        return [to_remote_post(p) for p in data["posts"]]

    async def get_post(self, post_id: int) -> UnifiedPost | None:
        """Return one catalog post, or ``None`` when the catalog does not know it."""
        data = await self._cached_json(f"post:{post_id}", f"/posts/{post_id}", missing_ok=True)
        return to_remote_post(data) if data is not None else None

    async def list_comments_for_post(self, post_id: int) -> list[UnifiedComment]:
        """Return catalog comments of a post; an unknown post has none."""
        data = await self._cached_json(
            f"comments:{post_id}", f"/comments/post/{post_id}", missing_ok=True
        )
        if data is None:
            return []
        return [to_remote_comment(c) for c in data.get("comments", [])]

    async def get_author(self, author_id: int) -> Author:
        """Return a catalog author.

        Raises:
            NotFoundError: If the catalog has no such user.
        """
        data = await self._cached_json(
            f"author:{author_id}",
            f"/users/{author_id}",
            {"select": _AUTHOR_DETAIL_FIELDS},
            missing_ok=True,
        )
        if data is None:
            raise NotFoundError(f"Author {author_id} not found")
        return to_author(data)

    async def list_authors(self) -> list[Author]:
        """Return catalog authors that have at least one post."""
        data = await self._cached_json(
            "authors", "/users", {"limit": 0, "select": "firstName,lastName"}
        )
        return [
            to_author(u)
            for u in data["users"]
            if int(u["id"]) not in USERS_WITH_NO_POSTS
        ]

    async def list_tags(self) -> list[dict[str, str]]:
        """Return catalog tags as ``{slug, name}`` pairs."""
        data = await self._cached_json("tags", "/posts/tags")
        return [{"slug": t["slug"], "name": t["name"]} for t in data]

    async def list_posts_by_tag(self, slug: str) -> list[UnifiedPost]:
        """Return catalog posts carrying the tag ``slug``."""
        data = await self._get_json(f"/posts/tag/{quote(slug, safe='')}")
        return [to_remote_post(p) for p in data["posts"]]

    async def list_posts_by_author(self, author_id: int) -> list[UnifiedPost]:
        """Return catalog posts written by ``author_id`` in catalog order."""
        data = await self._get_json(f"/users/{author_id}/posts")
        return [to_remote_post(p) for p in data["posts"]]

    async def search_posts(self, query: str) -> list[UnifiedPost]:
        """Return posts matching ``query`` as text or as an exact tag.

        Text and tag lookups run concurrently; a non-OK answer from either
        lookup counts as no matches, a transport failure does not. Text
        matches come first and duplicates are dropped by id.
        """
        by_text, by_tag = await asyncio.gather(
            self._request("/posts/search", {"q": query}),
            self._request(f"/posts/tag/{quote(query, safe='')}"),
        )
        posts: dict[int, UnifiedPost] = {}
        for response in (by_text, by_tag):
            if not response.is_success:
                continue
            for payload in response.json().get("posts", []):
                post = to_remote_post(payload)
                posts.setdefault(post.id, post)
        return list(posts.values())

    async def sort_posts(self, field: SortField, order: SortOrder) -> list[UnifiedPost]:
        """Return the full catalog collection sorted server-side."""
        data = await self._get_json("/posts", {"sortBy": field, "order": order, "limit": 0})
        return [to_remote_post(p) for p in data["posts"]]


_catalog_client: CatalogClient | None = None


def get_catalog_client() -> CatalogClient:
    """Return the process-wide catalog client."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = CatalogClient()
    return _catalog_client
