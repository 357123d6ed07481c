"""One consistent view over catalog posts and local posts.

Reads fan out to the remote catalog and the local store concurrently, merge
the two result sets, de-duplicate by id (the catalog wins on a collision),
sort with one comparator, and annotate every record with the capabilities of
the requesting actor. A catalog failure fails the whole read; there is no
partial result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from sqlalchemy.orm import Session

from unified_blog.core.settings import settings
from unified_blog.repositories.comment_repo import CommentRepository
from unified_blog.repositories.post_repo import PostRepository
from unified_blog.schemas.author import Author
from unified_blog.schemas.comment import CommentView, UnifiedComment
from unified_blog.schemas.common import SortField, SortOrder
from unified_blog.schemas.post import PostPage, PostView, UnifiedPost
from unified_blog.schemas.tag import UnifiedTag
from unified_blog.services.cache import ViewCache
from unified_blog.services.catalog import CatalogClient
from unified_blog.services.errors import ValidationError
from unified_blog.services.id_allocator import is_remote_post_id
from unified_blog.services.permissions import annotate_comment, annotate_post
from unified_blog.services.records import to_local_comment, to_local_post

logger = logging.getLogger(__name__)

T = TypeVar("T")

SORT_FIELDS: tuple[SortField, ...] = ("id", "title", "body")


def sort_key(field: SortField) -> Callable[[UnifiedPost], object]:
    """Return the sort key for ``field``: numeric for ids, case-folded text otherwise."""
    if field == "id":
        return lambda post: post.id
    return lambda post: (getattr(post, field) or "").casefold()


def sort_posts_in_memory(
    posts: Iterable[UnifiedPost],
    field: SortField,
    order: SortOrder,
) -> list[UnifiedPost]:
    """Stable-sort ``posts``; ties keep their input order in both directions."""
    return sorted(posts, key=sort_key(field), reverse=order == "desc")


def merge_unique(*sources: Iterable[UnifiedPost]) -> list[UnifiedPost]:
    """Concatenate sources, keeping the first record seen for each id."""
    merged: dict[int, UnifiedPost] = {}
    for source in sources:
        for post in source:
            merged.setdefault(post.id, post)
    return list(merged.values())


def title_case_tag(name: str) -> str:
    return name.strip().lower().capitalize()


class UnificationEngine:
    """Unified read operations over both post sources."""

    def __init__(self, session: Session, catalog: CatalogClient, cache: ViewCache) -> None:
        self.session = session
        self.catalog = catalog
        self.cache = cache
        self.posts = PostRepository(session)
        self.comments = CommentRepository(session)

    async def _local(self, read: Callable[[], T]) -> T:
        """Run a blocking store read off the event loop."""
        return await asyncio.to_thread(read)

    def _cached_posts(self, key: str) -> list[UnifiedPost] | None:
        cached = self.cache.get(key)
        if cached is None:
            return None
        logger.debug("View cache hit for %s", key)
        return [UnifiedPost.model_validate(p) for p in cached]

    def _store_posts(
        self,
        key: str,
        posts: list[UnifiedPost],
        tags: Iterable[str],
        seen: dict[str, int],
    ) -> None:
        self.cache.set(key, [p.model_dump(mode="json") for p in posts], tags=tags, seen=seen)

    async def get_by_id(self, post_id: int, actor_id: int | None = None) -> PostView | None:
        """Return one post, local first, then the catalog for catalog-range ids."""
        key = f"post:{post_id}"
        cached = self._cached_posts(key)
        if cached:
            return annotate_post(cached[0], actor_id)

        seen = self.cache.generations("posts", key)
        local = await self._local(lambda: self.posts.get_by_id(post_id))
        if local is not None:
            post: UnifiedPost | None = to_local_post(local)
        elif is_remote_post_id(post_id):
            post = await self.catalog.get_post(post_id)
        else:
            post = None

        if post is None:
            return None
        self._store_posts(key, [post], tags=("posts", key), seen=seen)
        return annotate_post(post, actor_id)

    async def list_by_author(self, author_id: int, actor_id: int | None = None) -> list[PostView]:
        """Return the author's catalog posts followed by their local posts."""
        remote, local = await asyncio.gather(
            self.catalog.list_posts_by_author(author_id),
            self._local(lambda: self.posts.list_by_author(author_id)),
        )
        posts = [*remote, *(to_local_post(p) for p in local)]
        return [annotate_post(p, actor_id) for p in posts]

    async def _sorted_union(self, field: SortField, order: SortOrder) -> list[UnifiedPost]:
        key = f"posts:sorted:{field}:{order}"
        cached = self._cached_posts(key)
        if cached is not None:
            return cached

        # Generations are read before either source so a write landing mid-read
        # keeps this result out of the cache.
        seen = self.cache.generations("posts")
        remote, local = await asyncio.gather(
            self.catalog.sort_posts(field, order),
            self._local(lambda: self.posts.list_sorted(field, order)),
        )
        # Each source sorts on its own terms; only the re-sort of the union is authoritative.
        merged = merge_unique(remote, (to_local_post(p) for p in local))
        result = sort_posts_in_memory(merged, field, order)
        self._store_posts(key, result, tags=("posts",), seen=seen)
        return result

    async def list_page(
        self,
        *,
        page: int,
        per_page: int,
        sort_field: SortField,
        sort_order: SortOrder,
        actor_id: int | None = None,
    ) -> PostPage:
        """Return one page of the globally sorted union of both sources.

        Pages past the end are empty; ``total`` is always the size of the
        whole union.
        """
        if page < 1 or per_page < 1:
            raise ValidationError("page and perPage must be at least 1")
        posts = await self._sorted_union(sort_field, sort_order)
        start = (page - 1) * per_page
        window = posts[start:start + per_page]
        return PostPage(posts=[annotate_post(p, actor_id) for p in window], total=len(posts))

    async def sort_posts(
        self,
        field: str | None = None,
        order: str | None = None,
        page: int | None = None,
        per_page: int | None = None,
        actor_id: int | None = None,
    ) -> PostPage:
        """Lenient front door for :meth:`list_page`.

        Unknown fields sort by id, anything but ``asc`` sorts descending, and
        missing or non-positive paging values fall back to the defaults.
        """
        sort_field: SortField = field if field in SORT_FIELDS else "id"  # type: ignore[assignment]
        sort_order: SortOrder = "asc" if order == "asc" else "desc"
        safe_page = page if page and page > 0 else 1
        safe_per_page = per_page if per_page and per_page > 0 else settings.default_per_page
        safe_per_page = min(safe_per_page, settings.max_per_page)
        return await self.list_page(
            page=safe_page,
            per_page=safe_per_page,
            sort_field=sort_field,
            sort_order=sort_order,
            actor_id=actor_id,
        )

    async def search(
        self,
        query: str,
        sort_field: SortField = "id",
        sort_order: SortOrder = "desc",
        actor_id: int | None = None,
    ) -> PostPage:
        """Return every post matching ``query`` by text or tag, unpaginated."""
        remote, local = await asyncio.gather(
            self.catalog.search_posts(query),
            self._local(lambda: self.posts.search(query)),
        )
        merged = merge_unique(remote, (to_local_post(p) for p in local))
        result = sort_posts_in_memory(merged, sort_field, sort_order)
        return PostPage(posts=[annotate_post(p, actor_id) for p in result], total=len(result))

    async def search_by_tag(
        self,
        tag_slug: str,
        sort_field: SortField = "id",
        sort_order: SortOrder = "desc",
        actor_id: int | None = None,
    ) -> PostPage:
        """Return every post carrying ``tag_slug`` exactly, unpaginated."""
        tag = tag_slug.strip()
        if not tag:
            return PostPage(posts=[], total=0)

        remote, local = await asyncio.gather(
            self.catalog.list_posts_by_tag(tag),
            self._local(lambda: self.posts.list_by_tag(tag)),
        )
        merged = merge_unique(remote, (to_local_post(p) for p in local))
        result = sort_posts_in_memory(merged, sort_field, sort_order)
        return PostPage(posts=[annotate_post(p, actor_id) for p in result], total=len(result))

    async def list_tags(self) -> list[UnifiedTag]:
        """Return catalog and local tag names, de-duplicated case-insensitively.

        Catalog tags win over local ones with the same slug; names are
        Title-Cased on the first letter.
        """
        cached = self.cache.get("tags")
        if cached is not None:
            return [UnifiedTag.model_validate(t) for t in cached]

        seen = self.cache.generations("tags")
        remote, local = await asyncio.gather(
            self.catalog.list_tags(),
            self._local(self.posts.list_tags),
        )
        by_slug: dict[str, UnifiedTag] = {}
        for tag in remote:
            slug = tag["slug"].lower()
            by_slug.setdefault(slug, UnifiedTag(slug=slug, name=title_case_tag(tag["name"])))
        for name in local:
            slug = name.strip().lower()
            by_slug.setdefault(slug, UnifiedTag(slug=slug, name=title_case_tag(name)))

        tags = list(by_slug.values())
        self.cache.set("tags", [t.model_dump() for t in tags], tags=("tags",), seen=seen)
        return tags

    async def list_comments_for_post(
        self,
        post_id: int,
        actor_id: int | None = None,
    ) -> list[CommentView]:
        """Return catalog comments first, then local comments by ascending id."""
        key = f"comments:{post_id}"
        cached = self.cache.get(key)
        if cached is not None:
            comments = [UnifiedComment.model_validate(c) for c in cached]
        else:
            seen = self.cache.generations(key)
            remote_read = (
                self.catalog.list_comments_for_post(post_id)
                if is_remote_post_id(post_id)
                else _no_comments()
            )
            remote, local = await asyncio.gather(
                remote_read,
                self._local(lambda: self.comments.list_for_post(post_id)),
            )
            comments = [*remote, *(to_local_comment(c) for c in local)]
            self.cache.set(
                key, [c.model_dump(mode="json") for c in comments], tags=(key,), seen=seen
            )
        return [annotate_comment(c, actor_id) for c in comments]

    async def list_authors(self) -> list[Author]:
        return await self.catalog.list_authors()

    async def get_author(self, author_id: int) -> Author:
        return await self.catalog.get_author(author_id)


async def _no_comments() -> list[UnifiedComment]:
    return []
