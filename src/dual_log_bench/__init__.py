"""Dual log benchmark - append/prepend ordered log over a sorted-set store."""

from .components import CoalesceIndex, DualLog, InMemoryOrderedLogStore, RetryingStore, open_store
from .core.clock import LogicalClock
from .core.config import BenchmarkConfig, load_config
from .core.driver import BenchmarkDriver
from .core.errors import (
    DualLogError,
    StoreCommunicationError,
    CallerError,
    IndexCorruptionError,
    ConfigError,
    ConsistencyWarning,
)
from .core.results import BenchmarkReport, OperationResult
from .core.types import NEG_INF, POS_INF, LogName, Placement, route_for_index

__all__ = [
    "BenchmarkConfig",
    "load_config",
    "BenchmarkDriver",
    "BenchmarkReport",
    "OperationResult",
    "CoalesceIndex",
    "DualLog",
    "InMemoryOrderedLogStore",
    "RetryingStore",
    "open_store",
    "LogicalClock",
    "DualLogError",
    "StoreCommunicationError",
    "CallerError",
    "IndexCorruptionError",
    "ConfigError",
    "ConsistencyWarning",
    "NEG_INF",
    "POS_INF",
    "LogName",
    "Placement",
    "route_for_index",
]
