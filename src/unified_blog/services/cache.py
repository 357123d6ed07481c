"""Short-lived caching for catalog reads and unified views.

Entries are JSON-compatible values stored under a string key and grouped by
tags (``posts``, ``post:{id}``, ``comments:{id}``, ``tags``) so that a write can
drop every view it affects. Each tag also carries a generation counter bumped on
invalidation; a reader that started before a write passes the generations it
saw to :meth:`ViewCache.set`, which then refuses to store the stale view. Redis is used when ``REDIS_URL`` is configured;
otherwise, or once Redis stops answering, an in-process store is used.
"""

from __future__ import annotations

import json
import logging
import time
from collections import defaultdict
from collections.abc import Iterable
from threading import Lock
from typing import Any

import redis

from unified_blog.core.settings import settings

logger = logging.getLogger(__name__)

_KEY_PREFIX = "ub:view:"
_TAG_PREFIX = "ub:tag:"
_GEN_PREFIX = "ub:gen:"


class ViewCache:
    """Tag-invalidated TTL cache."""

    def __init__(self, redis_url: str | None = None, default_ttl: int | None = None) -> None:
        self.default_ttl = default_ttl if default_ttl is not None else settings.view_cache_ttl_seconds
        self._entries: dict[str, tuple[float, Any]] = {}
        self._tag_index: dict[str, set[str]] = defaultdict(set)
        self._generations: dict[str, int] = defaultdict(int)
        self._lock = Lock()
        self._redis: redis.Redis | None = None
        if redis_url:
            self._redis = redis.Redis.from_url(redis_url, socket_timeout=1.0)

    def _drop_redis(self, exc: Exception) -> None:
        logger.warning("Redis view cache unavailable, using in-process cache: %s", exc)
        self._redis = None

    def get(self, key: str) -> Any | None:
        """Return the cached value or ``None`` when missing or expired."""
        if self._redis is not None:
            try:
                raw = self._redis.get(_KEY_PREFIX + key)
                return json.loads(raw) if raw is not None else None
            except redis.RedisError as exc:
                self._drop_redis(exc)

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at < time.monotonic():
                self._entries.pop(key, None)
                return None
            return value

    def generations(self, *tags: str) -> dict[str, int]:
        """Return the current invalidation generation of each tag."""
        if self._redis is not None:
            try:
                raw = self._redis.mget([_GEN_PREFIX + tag for tag in tags]) if tags else []
                return {tag: int(value or 0) for tag, value in zip(tags, raw)}
            except redis.RedisError as exc:
                self._drop_redis(exc)

        with self._lock:
            return {tag: self._generations[tag] for tag in tags}

    def set(
        self,
        key: str,
        value: Any,
        *,
        tags: Iterable[str] = (),
        ttl: int | None = None,
        seen: dict[str, int] | None = None,
    ) -> bool:
        """Store a value under ``key`` and attach it to ``tags``.

        ``seen`` holds the tag generations observed before ``value`` was
        computed; if any of them has moved since, the value is stale and is
        not stored. Returns whether the value was stored.
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return False
        tags = list(tags)
        seen = seen or {}

        if self._redis is not None:
            try:
                return self._redis_set(key, value, tags, ttl, seen)
            except redis.RedisError as exc:
                self._drop_redis(exc)

        with self._lock:
            if any(self._generations[tag] != gen for tag, gen in seen.items()):
                logger.debug("Skipping stale view %s", key)
                return False
            self._entries[key] = (time.monotonic() + ttl, value)
            for tag in tags:
                self._tag_index[tag].add(key)
            return True

    def _redis_set(
        self, key: str, value: Any, tags: list[str], ttl: int, seen: dict[str, int]
    ) -> bool:
        gen_keys = [_GEN_PREFIX + tag for tag in seen]
        with self._redis.pipeline() as pipe:
            try:
                if gen_keys:
                    pipe.watch(*gen_keys)
                    current = pipe.mget(gen_keys)
                    if [int(v or 0) for v in current] != list(seen.values()):
                        logger.debug("Skipping stale view %s", key)
                        return False
                pipe.multi()
                pipe.set(_KEY_PREFIX + key, json.dumps(value), ex=ttl)
                for tag in tags:
                    pipe.sadd(_TAG_PREFIX + tag, key)
                pipe.execute()
                return True
            except redis.WatchError:
                logger.debug("Skipping stale view %s", key)
                return False

    def invalidate(self, *tags: str) -> None:
        """Drop every entry attached to any of ``tags`` and bump their generations."""
        logger.debug("Invalidating cached views for tags %s", tags)
        if self._redis is not None:
            try:
                for tag in tags:
                    self._redis.incr(_GEN_PREFIX + tag)
                    members = self._redis.smembers(_TAG_PREFIX + tag)
                    keys = [_KEY_PREFIX + m.decode() for m in members]
                    if keys:
                        self._redis.delete(*keys)
                    self._redis.delete(_TAG_PREFIX + tag)
                return
            except redis.RedisError as exc:
                self._drop_redis(exc)

        with self._lock:
            for tag in tags:
                self._generations[tag] += 1
                for key in self._tag_index.pop(tag, set()):
                    self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all in-process entries."""
        with self._lock:
            self._entries.clear()
            self._tag_index.clear()


_view_cache: ViewCache | None = None
_view_cache_lock = Lock()


def get_view_cache() -> ViewCache:
    """Return the process-wide view cache."""
    global _view_cache
    with _view_cache_lock:
        if _view_cache is None:
            _view_cache = ViewCache(redis_url=settings.redis_url)
        return _view_cache
