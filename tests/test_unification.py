# tests/test_unification.py
"""Tests for the unified read operations."""

import asyncio

import pytest

from unified_blog.schemas.post import PostCreate
from unified_blog.services import post_service
from unified_blog.services.errors import UpstreamUnavailableError, ValidationError
from unified_blog.services.unification import merge_unique, sort_posts_in_memory

from tests.conftest import remote_post


@pytest.mark.asyncio
async def test_list_page_merges_and_sorts_both_sources(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(1, "Alpha"), remote_post(2, "Beta")]
    make_post(252, title="Gamma")

    page = await unification.list_page(page=1, per_page=10, sort_field="id", sort_order="desc")

    assert [p.id for p in page.posts] == [252, 2, 1]
    assert page.total == 3
    assert [p.origin for p in page.posts] == ["local", "remote", "remote"]


@pytest.mark.asyncio
async def test_list_page_sorts_titles_case_insensitively(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(1, "banana"), remote_post(2, "Cherry")]
    make_post(252, title="apple")

    page = await unification.list_page(page=1, per_page=10, sort_field="title", sort_order="asc")

    assert [p.title for p in page.posts] == ["apple", "banana", "Cherry"]


@pytest.mark.asyncio
async def test_page_past_the_end_is_empty_with_full_total(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(1, "Alpha"), remote_post(2, "Beta")]
    make_post(252)

    page = await unification.list_page(page=100, per_page=10, sort_field="id", sort_order="desc")

    assert page.posts == []
    assert page.total == 3


@pytest.mark.asyncio
async def test_pages_partition_the_union(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(i, f"Remote {i}") for i in range(1, 6)]
    make_post(252)
    make_post(253)

    seen = []
    for page_no in (1, 2, 3):
        page = await unification.list_page(page=page_no, per_page=3, sort_field="id", sort_order="asc")
        seen.extend(p.id for p in page.posts)

    assert seen == [1, 2, 3, 4, 5, 252, 253]


@pytest.mark.asyncio
async def test_list_page_rejects_non_positive_paging(unification) -> None:
    with pytest.raises(ValidationError):
        await unification.list_page(page=0, per_page=10, sort_field="id", sort_order="desc")


@pytest.mark.asyncio
async def test_sort_posts_falls_back_to_defaults(unification, catalog) -> None:
    catalog.posts = [remote_post(1, "Alpha"), remote_post(2, "Beta")]

    page = await unification.sort_posts("views", "sideways", page=-2, per_page=0)

    assert [p.id for p in page.posts] == [2, 1]


@pytest.mark.asyncio
async def test_catalog_failure_fails_the_whole_page(unification, catalog, make_post) -> None:
    make_post(252)
    catalog.unavailable = True

    with pytest.raises(UpstreamUnavailableError):
        await unification.list_page(page=1, per_page=10, sort_field="id", sort_order="desc")


@pytest.mark.asyncio
async def test_search_matches_local_text_and_tags_once(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(3, "History of things", tags=["history"])]
    make_post(252, title="Some history", tags=["history"])
    make_post(253, title="Unrelated", tags=["History"])
    make_post(254, title="Nothing here")

    page = await unification.search("history")

    assert [p.id for p in page.posts] == [253, 252, 3]
    assert page.total == 3


@pytest.mark.asyncio
async def test_local_search_is_literal(unification, make_post) -> None:
    make_post(252, title="Costs (approx.)")
    make_post(253, title="Costs approx")

    page = await unification.search("(approx.)")

    assert [p.id for p in page.posts] == [252]


@pytest.mark.asyncio
async def test_search_by_blank_tag_is_empty(unification, catalog) -> None:
    page = await unification.search_by_tag("   ")

    assert page.posts == []
    assert page.total == 0
    assert catalog.calls == []


@pytest.mark.asyncio
async def test_search_by_tag_merges_sources(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(4, "Remote", tags=["love"]), remote_post(5, "Other", tags=["war"])]
    make_post(252, tags=["love"])

    page = await unification.search_by_tag("love", sort_order="asc")

    assert [p.id for p in page.posts] == [4, 252]


@pytest.mark.asyncio
async def test_get_by_id_prefers_local_then_catalog(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(3, "Remote")]
    make_post(252, title="Mine", user_id=7)

    local = await unification.get_by_id(252, actor_id=7)
    remote = await unification.get_by_id(3, actor_id=7)

    assert local.origin == "local" and local.can_edit
    assert remote.origin == "remote" and not remote.can_edit


@pytest.mark.asyncio
async def test_get_by_id_unknown_local_id_skips_catalog(unification, catalog) -> None:
    assert await unification.get_by_id(9999) is None
    assert "get_post" not in catalog.calls


@pytest.mark.asyncio
async def test_get_by_id_missing_catalog_post_is_none(unification, catalog) -> None:
    assert await unification.get_by_id(42) is None
    assert catalog.calls == ["get_post"]


@pytest.mark.asyncio
async def test_list_by_author_puts_catalog_posts_first(unification, catalog, make_post) -> None:
    catalog.posts = [remote_post(10, "R1", user_id=7), remote_post(11, "R2", user_id=7),
                     remote_post(12, "Other", user_id=1)]
    make_post(252, user_id=7)
    make_post(253, user_id=9)

    posts = await unification.list_by_author(7)

    assert [p.id for p in posts] == [10, 11, 252]


@pytest.mark.asyncio
async def test_list_tags_dedupes_and_capitalizes(unification, catalog, make_post) -> None:
    catalog.tags = [{"slug": "history", "name": "History"}, {"slug": "love", "name": "love"}]
    make_post(252, tags=["HISTORY", "cooking"])

    tags = await unification.list_tags()

    assert [(t.slug, t.name) for t in tags] == [
        ("history", "History"),
        ("love", "Love"),
        ("cooking", "Cooking"),
    ]


@pytest.mark.asyncio
async def test_comments_list_catalog_first_then_local(unification, catalog, make_post, make_comment) -> None:
    catalog.add_comment(5, 1, "remote one")
    make_comment(345, 1, body="later")
    make_comment(341, 1, body="earlier")

    comments = await unification.list_comments_for_post(1, actor_id=7)

    assert [c.id for c in comments] == [5, 341, 345]
    assert comments[0].origin == "remote" and not comments[0].can_edit
    assert comments[1].can_edit


@pytest.mark.asyncio
async def test_comments_of_local_post_skip_catalog(unification, catalog, make_post, make_comment) -> None:
    make_post(252)
    make_comment(341, 252)

    comments = await unification.list_comments_for_post(252)

    assert [c.id for c in comments] == [341]
    assert "list_comments_for_post" not in catalog.calls


@pytest.mark.asyncio
async def test_write_invalidates_cached_page(unification, catalog, db_session, view_cache) -> None:
    catalog.posts = [remote_post(1, "Alpha")]
    before = await unification.list_page(page=1, per_page=10, sort_field="id", sort_order="desc")

    await post_service.create_post(
        session=db_session,
        actor_id=7,
        data=PostCreate(title="Fresh", body="Body"),
        cache=view_cache,
    )
    after = await unification.list_page(page=1, per_page=10, sort_field="id", sort_order="desc")

    assert before.total == 1
    assert [p.id for p in after.posts] == [252, 1]


@pytest.mark.asyncio
async def test_cached_page_is_reused(unification, catalog) -> None:
    catalog.posts = [remote_post(1, "Alpha")]
    await unification.list_page(page=1, per_page=10, sort_field="id", sort_order="desc")
    await unification.list_page(page=2, per_page=10, sort_field="id", sort_order="desc")

    assert catalog.calls.count("sort_posts") == 1


def test_merge_unique_keeps_first_record() -> None:
    merged = merge_unique([remote_post(1, "first")], [remote_post(1, "second"), remote_post(2, "x")])
    assert [(p.id, p.title) for p in merged] == [(1, "first"), (2, "x")]


def test_sort_is_stable_for_ties() -> None:
    posts = [remote_post(1, "same"), remote_post(2, "Same"), remote_post(3, "SAME")]
    assert [p.id for p in sort_posts_in_memory(posts, "title", "asc")] == [1, 2, 3]
    assert [p.id for p in sort_posts_in_memory(posts, "title", "desc")] == [1, 2, 3]


@pytest.mark.asyncio
async def test_write_during_read_is_not_hidden_by_cache(
    unification, catalog, session_factory, view_cache, monkeypatch
) -> None:
    catalog.posts = [remote_post(1, "Alpha")]
    plain_sort = catalog.sort_posts

    async def slow_sort(field, order):
        # The local side has been read by now; the write lands before the merge.
        await asyncio.sleep(0.2)
        with session_factory() as writer:
            await post_service.create_post(
                session=writer,
                actor_id=7,
                data=PostCreate(title="Fresh", body="Body"),
                cache=view_cache,
            )
        return await plain_sort(field, order)

    monkeypatch.setattr(catalog, "sort_posts", slow_sort)
    await unification.list_page(page=1, per_page=10, sort_field="id", sort_order="desc")
    monkeypatch.setattr(catalog, "sort_posts", plain_sort)

    after = await unification.list_page(page=1, per_page=10, sort_field="id", sort_order="desc")

    assert [p.id for p in after.posts] == [252, 1]
    assert after.total == 2
