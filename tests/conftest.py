# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from unified_blog.api.v1.dependencies import get_cache_dep, get_catalog_dep
from unified_blog.core.security import create_access_token
from unified_blog.db.session import Base
from unified_blog.db.session import get_db as app_get_session
from unified_blog.main import app as fastapi_app
from unified_blog.models import CustomComment, CustomPost
from unified_blog.schemas.author import Author
from unified_blog.schemas.comment import UnifiedComment
from unified_blog.schemas.post import UnifiedPost
from unified_blog.services.cache import ViewCache
from unified_blog.services.catalog import to_author, to_remote_comment, to_remote_post
from unified_blog.services.errors import NotFoundError, UpstreamUnavailableError
from unified_blog.services.unification import UnificationEngine

TEST_DB_URL = "sqlite://"


def remote_post(post_id: int, title: str, body: str = "", tags: list[str] | None = None,
                user_id: int = 1, likes: int = 0, dislikes: int = 0) -> UnifiedPost:
    """Build a catalog post the way the catalog client would."""
    return to_remote_post({
        "id": post_id,
        "title": title,
        "body": body or f"body of {title}",
        "tags": tags or [],
        "reactions": {"likes": likes, "dislikes": dislikes},
        "userId": user_id,
    })


class FakeCatalog:
    """In-memory stand-in for the remote catalog."""

    def __init__(self) -> None:
        self.posts: list[UnifiedPost] = []
        self.comments: dict[int, list[UnifiedComment]] = {}
        self.authors: dict[int, Author] = {
            1: to_author({"id": 1, "firstName": "Emily", "lastName": "Johnson"}),
            7: to_author({"id": 7, "firstName": "Alexander", "lastName": "Jones"}),
            9: to_author({"id": 9, "firstName": "Isabella", "lastName": "Anderson"}),
        }
        self.tags: list[dict[str, str]] = []
        self.unavailable = False
        self.calls: list[str] = []

    def _hit(self, name: str) -> None:
        self.calls.append(name)
        if self.unavailable:
            raise UpstreamUnavailableError("catalog down")

    def add_comment(self, comment_id: int, post_id: int, body: str, user_id: int = 1) -> None:
        self.comments.setdefault(post_id, []).append(to_remote_comment({
            "id": comment_id,
            "postId": post_id,
            "body": body,
            "likes": 3,
            "user": {"id": user_id, "username": f"user{user_id}", "fullName": f"User {user_id}"},
        }))

    async def list_all_posts(self) -> list[UnifiedPost]:
        self._hit("list_all_posts")
        return list(self.posts)

    async def get_post(self, post_id: int) -> UnifiedPost | None:
        self._hit("get_post")
        return next((p for p in self.posts if p.id == post_id), None)

    async def list_comments_for_post(self, post_id: int) -> list[UnifiedComment]:
        self._hit("list_comments_for_post")
        return list(self.comments.get(post_id, []))

    async def get_author(self, author_id: int) -> Author:
        self._hit("get_author")
        if author_id not in self.authors:
            raise NotFoundError(f"Author {author_id} not found")
        return self.authors[author_id]

    async def list_authors(self) -> list[Author]:
        self._hit("list_authors")
        return list(self.authors.values())

    async def list_tags(self) -> list[dict[str, str]]:
        self._hit("list_tags")
        return list(self.tags)

    async def list_posts_by_tag(self, slug: str) -> list[UnifiedPost]:
        self._hit("list_posts_by_tag")
        return [p for p in self.posts if slug in p.tags]

    async def list_posts_by_author(self, author_id: int) -> list[UnifiedPost]:
        self._hit("list_posts_by_author")
        return [p for p in self.posts if p.user_id == author_id]

    async def search_posts(self, query: str) -> list[UnifiedPost]:
        self._hit("search_posts")
        needle = query.lower()
        by_text = [p for p in self.posts if needle in p.title.lower() or needle in p.body.lower()]
        by_tag = [p for p in self.posts if query in p.tags]
        seen: dict[int, UnifiedPost] = {}
        for post in [*by_text, *by_tag]:
            seen.setdefault(post.id, post)
        return list(seen.values())

    async def sort_posts(self, field: str, order: str) -> list[UnifiedPost]:
        self._hit("sort_posts")
        # Case-sensitive on purpose: the engine must re-sort the union itself.
        return sorted(self.posts, key=lambda p: getattr(p, field), reverse=order == "desc")


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture()
def view_cache() -> ViewCache:
    return ViewCache(redis_url=None, default_ttl=60)


@pytest.fixture()
def unification(db_session: Session, catalog: FakeCatalog, view_cache: ViewCache) -> UnificationEngine:
    return UnificationEngine(db_session, catalog, view_cache)  # type: ignore[arg-type]


@pytest.fixture()
def make_post(session_factory: sessionmaker) -> Callable[..., CustomPost]:
    """Persist a local post through a separate session and return it."""

    def _make(post_id: int, title: str = "Local post", body: str = "Local body",
              tags: list[str] | None = None, user_id: int = 7, **extra: Any) -> CustomPost:
        with session_factory() as session:
            post = CustomPost(
                id=post_id,
                title=title,
                body=body,
                tags=tags or [],
                likes=extra.pop("likes", 0),
                dislikes=extra.pop("dislikes", 0),
                user_reactions=extra.pop("user_reactions", []),
                user_id=user_id,
                **extra,
            )
            session.add(post)
            session.commit()
            session.refresh(post)
            session.expunge(post)
            return post

    return _make


@pytest.fixture()
def make_comment(session_factory: sessionmaker) -> Callable[..., CustomComment]:
    """Persist a local comment through a separate session and return it."""

    def _make(comment_id: int, post_id: int, body: str = "A comment",
              user_id: int = 7, liked_by: list[Any] | None = None) -> CustomComment:
        with session_factory() as session:
            comment = CustomComment(
                id=comment_id,
                post_id=post_id,
                body=body,
                likes=len(liked_by or []),
                liked_by=liked_by or [],
                user_id=user_id,
                user_full_name=f"User {user_id}",
            )
            session.add(comment)
            session.commit()
            session.refresh(comment)
            session.expunge(comment)
            return comment

    return _make


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(
    app: FastAPI,
    db_session: Session,
    catalog: FakeCatalog,
    view_cache: ViewCache,
) -> Iterator[TestClient]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_catalog_dep] = lambda: catalog
    app.dependency_overrides[get_cache_dep] = lambda: view_cache
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_token() -> dict[str, str]:
    """Return authorization headers for actor 7."""
    return {"Authorization": f"Bearer {create_access_token(7)}"}


@pytest.fixture()
def other_auth_token() -> dict[str, str]:
    """Return authorization headers for actor 9."""
    return {"Authorization": f"Bearer {create_access_token(9)}"}
