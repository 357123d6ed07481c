"""Retry helpers that make single-record writes safe under concurrency.

Rows carry a version counter (``version_id_col``); a write that loses a race
fails with ``StaleDataError`` at commit. New rows are inserted with a
precomputed primary key; a concurrent insert of the same key fails with
``IntegrityError``. In both cases the transaction is rolled back and the
whole read-modify-persist step is run again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from unified_blog.core.settings import settings
from unified_blog.services.errors import WriteConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_versioned(
    session: Session,
    operation: Callable[[], T],
    *,
    attempts: int | None = None,
) -> T:
    """Run ``operation`` and commit, retrying on optimistic version conflicts.

    ``operation`` must re-read the records it changes; it is called once per
    attempt against a clean session. Domain errors it raises propagate after
    the session is rolled back.
    """
    attempts = attempts or settings.write_retry_attempts
    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            session.commit()
            return result
        except StaleDataError:
            session.rollback()
            logger.warning("Version conflict on attempt %d/%d, retrying", attempt, attempts)
        except Exception:
            session.rollback()
            raise
    raise WriteConflictError("Record was modified concurrently; retry budget exhausted")


def insert_with_allocated_id(
    session: Session,
    allocate: Callable[[], int],
    build: Callable[[int], T],
    *,
    attempts: int | None = None,
) -> T:
    """Insert the record produced by ``build(allocate())``, retrying on id collisions.

    Only a collision on the allocated primary key is retried; any other
    integrity failure propagates.
    """
    attempts = attempts or settings.write_retry_attempts
    for attempt in range(1, attempts + 1):
        new_id = allocate()
        record = build(new_id)
        session.add(record)
        try:
            session.commit()
            return record
        except IntegrityError:
            session.rollback()
            if session.get(type(record), new_id) is None:
                raise
            logger.warning(
                "Id %d already taken on attempt %d/%d, reallocating", new_id, attempt, attempts
            )
    raise WriteConflictError("Could not allocate a unique id; retry budget exhausted")
