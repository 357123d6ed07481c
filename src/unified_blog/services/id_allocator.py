"""Id allocation for local posts and comments.

Local ids continue after the highest remote catalog id so the two sources
never overlap. Comments use one global counter, independent of the post they
belong to.
"""

from __future__ import annotations

from unified_blog.repositories.comment_repo import CommentRepository
from unified_blog.repositories.post_repo import PostRepository
from unified_blog.services.catalog import API_COMMENTS_MAX_ID, API_POST_COUNT


def next_post_id(repo: PostRepository) -> int:
    """Return ``max(251, highest local post id) + 1``."""
    return max(API_POST_COUNT, repo.max_id() or 0) + 1


def next_comment_id(repo: CommentRepository) -> int:
    """Return ``max(340, highest local comment id) + 1``."""
    return max(API_COMMENTS_MAX_ID, repo.max_id() or 0) + 1


def is_remote_post_id(post_id: int) -> bool:
    """Return True when ``post_id`` falls in the catalog's id range."""
    return 1 <= post_id <= API_POST_COUNT


def is_remote_comment_id(comment_id: int) -> bool:
    return 1 <= comment_id <= API_COMMENTS_MAX_ID
