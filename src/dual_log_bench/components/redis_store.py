"""Redis-backed ordered log store.

Thin adapter mapping OrderedLogStore onto redis-py commands.
"""

from __future__ import annotations

import functools
import logging
import math
from collections.abc import Callable
from typing import Any, TypeVar

import redis

from ..core.errors import StoreCommunicationError
from ..core.types import Member, Score

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _bound(score: Score) -> str | Score:
    """Render a score bound the way ZRANGEBYSCORE expects it."""
    if isinstance(score, float) and math.isinf(score):
        return "+inf" if score > 0 else "-inf"
    return score


def _wrap_errors(fn: Callable[..., T]) -> Callable[..., T]:
    @functools.wraps(fn)
    def wrapper(self: RedisOrderedLogStore, *args: Any, **kwargs: Any) -> T:
        try:
            return fn(self, *args, **kwargs)
        except redis.RedisError as e:
            raise StoreCommunicationError(f"redis {fn.__name__} failed: {e}") from e
    return wrapper


class RedisOrderedLogStore:
    """OrderedLogStore over a single Redis database.

    Args:
        url: Redis connection URL, e.g. redis://localhost:6379/0
        client: Pre-built client (takes precedence over url)
    """

    def __init__(self, url: str = "redis://localhost:6379/0", client: redis.Redis | None = None):
        self._client = client if client is not None else redis.Redis.from_url(url)
        logger.info(f"Using redis store at {url}")

    @_wrap_errors
    def zadd(self, name: str, score: Score, member: Member) -> None:
        self._client.zadd(name, {member: score})

    @_wrap_errors
    def zrange_asc(self, name: str, min_score: Score, max_score: Score) -> list[Member]:
        return self._client.zrangebyscore(name, _bound(min_score), _bound(max_score))

    @_wrap_errors
    def zrange_desc(self, name: str, min_score: Score, max_score: Score) -> list[Member]:
        # ZREVRANGEBYSCORE takes max before min
        return self._client.zrevrangebyscore(name, _bound(max_score), _bound(min_score))

    @_wrap_errors
    def zrem_range(self, name: str, min_score: Score, max_score: Score) -> int:
        return int(self._client.zremrangebyscore(name, _bound(min_score), _bound(max_score)))

    @_wrap_errors
    def zcount(self, name: str, min_score: Score, max_score: Score) -> int:
        return int(self._client.zcount(name, _bound(min_score), _bound(max_score)))

    @_wrap_errors
    def get(self, key: str) -> str | None:
        value = self._client.get(key)
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else value

    @_wrap_errors
    def set(self, key: str, value: str) -> None:
        self._client.set(key, value)

    @_wrap_errors
    def push_left(self, key: str, value: Member) -> int:
        return int(self._client.lpush(key, value))

    @_wrap_errors
    def push_right(self, key: str, value: Member) -> int:
        return int(self._client.rpush(key, value))

    @_wrap_errors
    def lrange(self, key: str) -> list[Member]:
        return self._client.lrange(key, 0, -1)

    @_wrap_errors
    def scan(self, cursor: int, pattern: str, batch_size: int) -> tuple[list[str], int]:
        next_cursor, keys = self._client.scan(cursor=cursor, match=pattern, count=batch_size)
        return [k.decode() if isinstance(k, bytes) else k for k in keys], int(next_cursor)

    @_wrap_errors
    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self._client.delete(*keys))

    @_wrap_errors
    def flush_namespace(self) -> None:
        self._client.flushdb()
        logger.info("Flushed redis database")

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
