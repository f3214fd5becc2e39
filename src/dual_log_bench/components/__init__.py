"""Store backends and the dual log data structures."""

from __future__ import annotations

from ..core.config import BenchmarkConfig
from ..interfaces.store import OrderedLogStore
from .coalesce_index import CoalesceIndex
from .dual_log import DualLog, TeardownStats
from .memory_store import InMemoryOrderedLogStore
from .retry import RetryingStore


def open_store(config: BenchmarkConfig) -> OrderedLogStore:
    """Build the configured backend, wrapped for retries when enabled."""
    if config.store_backend == "redis":
        # redis-py is an optional extra, only needed for this backend
        from .redis_store import RedisOrderedLogStore

        store: OrderedLogStore = RedisOrderedLogStore(config.redis_url)
    else:
        store = InMemoryOrderedLogStore()

    if config.store_retries > 0:
        store = RetryingStore(
            store,
            max_retries=config.store_retries,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        )
    return store


__all__ = [
    "CoalesceIndex",
    "DualLog",
    "TeardownStats",
    "InMemoryOrderedLogStore",
    "RetryingStore",
    "open_store",
]
