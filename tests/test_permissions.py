# tests/test_permissions.py
"""Tests for capability flags."""

from unified_blog.schemas.comment import UnifiedComment
from unified_blog.schemas.post import UnifiedPost, UserReaction
from unified_blog.services.permissions import (
    annotate_comment,
    annotate_post,
    can_comment,
    can_delete,
    can_edit,
    can_react,
    coerce_actor_id,
)


def _post(origin: str = "local", user_id: int = 7, **extra) -> UnifiedPost:
    return UnifiedPost(
        id=252 if origin == "local" else 3,
        title="t",
        body="b",
        user_id=user_id,
        origin=origin,
        **extra,
    )


def test_owner_can_edit_and_delete_local_post() -> None:
    post = _post()
    assert can_edit(post, 7)
    assert can_delete(post, 7)


def test_other_actor_cannot_edit_local_post() -> None:
    post = _post()
    assert not can_edit(post, 9)
    assert not can_delete(post, 9)


def test_remote_post_is_read_only_even_for_its_author() -> None:
    post = _post(origin="remote", user_id=7)
    assert not can_edit(post, 7)
    assert not can_delete(post, 7)
    assert not can_react(post)


def test_anonymous_actor_has_no_write_capabilities() -> None:
    post = _post()
    assert not can_edit(post, None)
    assert not can_comment(None)


def test_any_actor_can_comment_on_any_post() -> None:
    assert can_comment(9)
    assert annotate_post(_post(origin="remote"), 9).can_comment


def test_react_allowed_on_local_regardless_of_ownership() -> None:
    assert can_react(_post(user_id=1))


def test_coerce_actor_id_handles_legacy_strings() -> None:
    assert coerce_actor_id("7") == 7
    assert coerce_actor_id(" 12 ") == 12
    assert coerce_actor_id("abc") is None
    assert coerce_actor_id(None) is None
    assert coerce_actor_id(True) is None


def test_annotate_post_reports_current_reaction() -> None:
    post = _post(user_reactions=[UserReaction(user_id=9, type="dislike")])
    view = annotate_post(post, 9)
    assert view.user_reaction == "dislike"
    assert view.can_react
    assert not view.can_edit
    assert annotate_post(post, 7).user_reaction is None


def test_annotate_comment_reports_like_state() -> None:
    comment = UnifiedComment(
        id=341,
        post_id=1,
        body="hi",
        likes=1,
        user_id=7,
        user_full_name="Alexander Jones",
        origin="local",
        liked_by=[9],
    )
    mine = annotate_comment(comment, 7)
    assert mine.can_edit and mine.can_delete and mine.can_like
    assert not mine.liked_by_current_user
    assert annotate_comment(comment, 9).liked_by_current_user


def test_remote_comment_cannot_be_liked() -> None:
    comment = UnifiedComment(
        id=5, post_id=1, body="hi", user_id=7, user_full_name="x", origin="remote"
    )
    view = annotate_comment(comment, 7)
    assert not view.can_like
    assert not view.can_edit
