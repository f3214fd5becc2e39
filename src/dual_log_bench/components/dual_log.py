"""Dual ordered log: an append log and a prepend log on one timeline.

The prepend log read in descending score order is everything "before",
the append log read ascending is everything "after". Items are located
for removal through the coalesce index, never by scanning a log.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.clock import LogicalClock
from ..core.config import BenchmarkConfig
from ..core.errors import ConsistencyWarning
from ..core.types import NEG_INF, POS_INF, LogName, Placement, Score, Timestamp, route_for_index
from ..interfaces.store import OrderedLogStore
from .coalesce_index import CoalesceIndex

logger = logging.getLogger(__name__)


@dataclass
class TeardownStats:
    """What clear_all() deleted."""

    log_keys_deleted: int
    index_entries_deleted: int


class DualLog:
    """Append/prepend pair of sorted sets plus their coalesce index.

    Args:
        store: Backing ordered log store
        config: Benchmark configuration (key layout, routing, journaling)
        clock: Shared logical clock; built from config if omitted

    Public API:
        - insert(identifier, payload, assign_as_prepend): Add one item
        - insert_at(index, identifier, payload): Add, routed by position
        - retrieve_range(min, max): Prepend desc + append asc
        - remove_by_id(identifier): Remove via the coalesce index
        - count(log): Live items in one or both logs
        - clear_all(): Drop both logs and every index entry

    Invariants:
        - Scores come from one clock, so they are unique across both logs
        - An index entry exists for every item inserted and not yet removed

    Insertion writes the log entry first and the index entry second with
    no atomicity between them. A failure in between leaves a log entry
    with no index entry; nothing reconciles such orphans except
    clear_all().
    """

    def __init__(self, store: OrderedLogStore, config: BenchmarkConfig, clock: LogicalClock | None = None):
        self._store = store
        self.config = config
        self.clock = clock if clock is not None else LogicalClock(step=config.timestamp_step)
        self.index = CoalesceIndex(store, config.coalesce_prefix)

    def insert(self, identifier: str, payload: bytes, assign_as_prepend: bool) -> Timestamp:
        """Add payload to one log and index it under identifier."""
        log = LogName.PREPEND if assign_as_prepend else LogName.APPEND
        ts = self.clock.next()

        self._store.zadd(self.config.log_key(log), ts, payload)
        self.index.record(identifier, Placement(log, ts))

        if self.config.journal_payloads:
            journal = self.config.journal_key(log)
            if log is LogName.PREPEND:
                self._store.push_left(journal, payload)
            else:
                self._store.push_right(journal, payload)
        return ts

    def insert_at(self, index: int, identifier: str, payload: bytes) -> Timestamp:
        """Insert the ``index``-th item, routed by the configured prepend share."""
        log = route_for_index(index, self.config.prepend_pct)
        return self.insert(identifier, payload, assign_as_prepend=log is LogName.PREPEND)

    def retrieve_partitions(self, min_score: Score = NEG_INF, max_score: Score = POS_INF) -> tuple[list[bytes], list[bytes]]:
        """Return (prepend results descending, append results ascending)."""
        prepended = self._store.zrange_desc(self.config.log_key(LogName.PREPEND), min_score, max_score)
        appended = self._store.zrange_asc(self.config.log_key(LogName.APPEND), min_score, max_score)
        return prepended, appended

    def retrieve_range(self, min_score: Score = NEG_INF, max_score: Score = POS_INF) -> list[bytes]:
        """Timeline view of the window: prepend part first, then append part.

        The two parts are concatenated, not merged by score.
        """
        prepended, appended = self.retrieve_partitions(min_score, max_score)
        return prepended + appended

    def remove_by_id(self, identifier: str) -> int:
        """Remove the item indexed under identifier; return how many were removed.

        The index entry is deleted once the log entry is gone.

        Raises:
            CallerError: If identifier is unknown or already removed
            ConsistencyWarning: If the score range removed anything but
                exactly one entry (the removal itself still happened)
        """
        placement = self.index.lookup(identifier)
        set_name = self.config.log_key(placement.log)
        removed = self._store.zrem_range(set_name, placement.score, placement.score)
        self.index.discard(identifier)

        if removed != 1:
            raise ConsistencyWarning(
                f"Expected 1 item to be removed with range {placement.score} from {set_name}, got {removed}"
            )
        return removed

    def count(self, log: LogName | None = None, min_score: Score = NEG_INF, max_score: Score = POS_INF) -> int:
        """Live items in ``log``, or in both logs when log is None."""
        logs = [log] if log is not None else list(LogName)
        return sum(self._store.zcount(self.config.log_key(name), min_score, max_score) for name in logs)

    def journal(self, log: LogName) -> list[bytes]:
        """Payloads pushed onto the journal list for ``log``, front first."""
        return self._store.lrange(self.config.journal_key(log))

    def clear_all(self) -> TeardownStats:
        """Delete both logs, their journals and every index entry."""
        keys = [self.config.log_key(name) for name in LogName]
        keys += [self.config.journal_key(name) for name in LogName]
        log_keys_deleted = self._store.delete(*keys)
        index_deleted = self.index.clear(self.config.scan_batch_size)
        return TeardownStats(log_keys_deleted=log_keys_deleted, index_entries_deleted=index_deleted)
