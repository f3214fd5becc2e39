"""Bounded retry with exponential backoff around any ordered log store."""

from __future__ import annotations

import logging
import random
import time
from typing import Any

from ..core.errors import StoreCommunicationError
from ..interfaces.store import OrderedLogStore

logger = logging.getLogger(__name__)

_RETRIED_OPS = frozenset({
    "zadd", "zrange_asc", "zrange_desc", "zrem_range", "zcount",
    "get", "set", "push_left", "push_right", "lrange",
    "scan", "delete", "flush_namespace",
})


class RetryingStore:
    """Wrap a store and retry failed calls with exponential backoff.

    Args:
        inner: Store to delegate to
        max_retries: Extra attempts after the first failure (0 = fail fast)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries
        jitter: Whether to scale each delay by a random factor in [0.5, 1.5]

    Only StoreCommunicationError is retried; the last one propagates.
    Retrying zrem_range or push_* after an ambiguous failure can apply
    the write twice; the removal count check reports the former.
    """

    def __init__(
        self,
        inner: OrderedLogStore,
        max_retries: int = 0,
        base_delay: float = 0.05,
        max_delay: float = 1.0,
        jitter: bool = True,
    ):
        self.inner = inner
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter

    def _call(self, op: str, *args: Any) -> Any:
        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                return getattr(self.inner, op)(*args)
            except StoreCommunicationError as e:
                if attempt == attempts - 1:
                    raise
                delay = min(self.base_delay * (2**attempt), self.max_delay)
                if self.jitter:
                    delay = delay * random.uniform(0.5, 1.5)
                logger.warning(f"{op} attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s")
                time.sleep(delay)
        raise AssertionError("unreachable")

    def __getattr__(self, name: str) -> Any:
        if name in _RETRIED_OPS:
            return lambda *args: self._call(name, *args)
        return getattr(self.inner, name)

    def close(self) -> None:
        self.inner.close()
