"""In-process ordered log store.

Uses sortedcontainers.SortedList for the sorted sets.
"""

from __future__ import annotations

import fnmatch
import logging
import threading
from collections import deque
from collections.abc import Iterable

from sortedcontainers import SortedList

from ..core.errors import StoreCommunicationError
from ..core.types import Member, Score

logger = logging.getLogger(__name__)


class InMemoryOrderedLogStore:
    """Thread-safe in-memory implementation of OrderedLogStore.

    Args:
        fail_on: Operation names that raise StoreCommunicationError,
            for exercising failure paths

    Invariants:
        - Each sorted set holds (score, member) pairs ordered by score,
          ties broken by member bytes
        - A member appears at most once per sorted set
        - One key holds exactly one kind of value
    """

    def __init__(self, fail_on: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._zsets: dict[str, SortedList] = {}
        self._zscores: dict[str, dict[Member, Score]] = {}
        self._scalars: dict[str, str] = {}
        self._lists: dict[str, deque[Member]] = {}
        self.fail_on: set[str] = set(fail_on)
        self.calls: dict[str, int] = {}

    def _enter(self, op: str) -> None:
        self.calls[op] = self.calls.get(op, 0) + 1
        if op in self.fail_on:
            raise StoreCommunicationError(f"Injected failure in {op}")

    def _window(self, name: str, min_score: Score, max_score: Score) -> list[tuple[Score, Member]]:
        zset = self._zsets.get(name)
        if not zset:
            return []
        # Members are bytes, so b"" sorts first and the sentinel tuple
        # (max_score, ...) must compare after every member at max_score.
        lo = zset.bisect_left((min_score, b""))
        hi = zset.bisect_left((max_score, _AfterAll()))
        return list(zset[lo:hi])

    # Sorted sets

    def zadd(self, name: str, score: Score, member: Member) -> None:
        with self._lock:
            self._enter("zadd")
            zset = self._zsets.setdefault(name, SortedList())
            scores = self._zscores.setdefault(name, {})
            if member in scores:
                zset.remove((scores[member], member))
            zset.add((score, member))
            scores[member] = score

    def zrange_asc(self, name: str, min_score: Score, max_score: Score) -> list[Member]:
        with self._lock:
            self._enter("zrange_asc")
            return [m for _, m in self._window(name, min_score, max_score)]

    def zrange_desc(self, name: str, min_score: Score, max_score: Score) -> list[Member]:
        with self._lock:
            self._enter("zrange_desc")
            return [m for _, m in reversed(self._window(name, min_score, max_score))]

    def zrem_range(self, name: str, min_score: Score, max_score: Score) -> int:
        with self._lock:
            self._enter("zrem_range")
            doomed = self._window(name, min_score, max_score)
            zset = self._zsets.get(name)
            scores = self._zscores.get(name, {})
            for entry in doomed:
                zset.remove(entry)
                del scores[entry[1]]
            if zset is not None and not zset:
                del self._zsets[name]
                del self._zscores[name]
            return len(doomed)

    def zcount(self, name: str, min_score: Score, max_score: Score) -> int:
        with self._lock:
            self._enter("zcount")
            return len(self._window(name, min_score, max_score))

    # Scalars

    def get(self, key: str) -> str | None:
        with self._lock:
            self._enter("get")
            return self._scalars.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._enter("set")
            self._scalars[key] = value

    # Lists

    def push_left(self, key: str, value: Member) -> int:
        with self._lock:
            self._enter("push_left")
            lst = self._lists.setdefault(key, deque())
            lst.appendleft(value)
            return len(lst)

    def push_right(self, key: str, value: Member) -> int:
        with self._lock:
            self._enter("push_right")
            lst = self._lists.setdefault(key, deque())
            lst.append(value)
            return len(lst)

    def lrange(self, key: str) -> list[Member]:
        with self._lock:
            self._enter("lrange")
            return list(self._lists.get(key, ()))

    # Keyspace

    def _all_keys(self) -> list[str]:
        return sorted({*self._zsets, *self._scalars, *self._lists})

    def scan(self, cursor: int, pattern: str, batch_size: int) -> tuple[list[str], int]:
        """Page through matching keys.

        The cursor is an offset into the sorted keyspace, so keys deleted
        between pages may shift later keys past the cursor; callers that
        delete while scanning should rescan until nothing matches.
        """
        with self._lock:
            self._enter("scan")
            keys = self._all_keys()
            page = keys[cursor:cursor + batch_size]
            next_cursor = cursor + batch_size
            if next_cursor >= len(keys):
                next_cursor = 0
            return [k for k in page if fnmatch.fnmatchcase(k, pattern)], next_cursor

    def delete(self, *keys: str) -> int:
        with self._lock:
            self._enter("delete")
            removed = 0
            for key in keys:
                existed = False
                if self._zsets.pop(key, None) is not None:
                    self._zscores.pop(key, None)
                    existed = True
                if self._scalars.pop(key, None) is not None:
                    existed = True
                if self._lists.pop(key, None) is not None:
                    existed = True
                removed += existed
            return removed

    def flush_namespace(self) -> None:
        with self._lock:
            self._enter("flush_namespace")
            self._zsets.clear()
            self._zscores.clear()
            self._scalars.clear()
            self._lists.clear()
        logger.info("Flushed in-memory store")

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class _AfterAll:
    """Compares greater than any member, for inclusive upper bounds."""

    def __lt__(self, other: object) -> bool:
        return False

    def __gt__(self, other: object) -> bool:
        return True
