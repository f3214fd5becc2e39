"""Benchmark driver - main public API.

Orchestrates insertion, retrieval, removal and teardown against a DualLog
and returns structured timings instead of printing them.
"""

from __future__ import annotations

import logging
import os
import random
import time
from collections.abc import Callable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from ..components.dual_log import DualLog
from ..core.types import POS_INF, LogName, Timestamp
from ..interfaces.store import OrderedLogStore
from .config import BenchmarkConfig
from .errors import ConsistencyWarning
from .results import BenchmarkReport, OperationResult

logger = logging.getLogger(__name__)


def coalesce_id(index: int) -> str:
    """Identifier under which the ``index``-th item is indexed."""
    return f"coalesce_{index}"


class BenchmarkDriver:
    """Runs the measured phases of one benchmark.

    Args:
        store: Ordered log store under test
        config: Benchmark configuration
        payload_fn: Returns a payload of the requested size

    Public API:
        - prepare(): Flush the store for isolation
        - run_insert(): Sequential or parallel insertion
        - run_retrieve_all(): Repeated full-range scans
        - run_retrieve_after(): Repeated windowed scans over the newer half
        - run_remove_by_id(): Random removals via the coalesce index
        - run_teardown(): Drop everything the run created
        - run_all(): All of the above in order

    StoreCommunicationError and CallerError propagate out of every phase.
    ConsistencyWarning is caught inside the phase, logged and recorded on
    the returned OperationResult.
    """

    def __init__(
        self,
        store: OrderedLogStore,
        config: BenchmarkConfig,
        payload_fn: Callable[[int], bytes] = os.urandom,
    ):
        self.config = config
        self.store = store
        self.log = DualLog(store, config)
        self._payload_fn = payload_fn
        self._rng = random.Random(config.seed)
        self._live_ids: list[str] = []
        self._scores: dict[str, Timestamp] = {}
        self._inserted = 0

    @property
    def live_ids(self) -> list[str]:
        return list(self._live_ids)

    def score_of(self, identifier: str) -> Timestamp | None:
        return self._scores.get(identifier)

    def _warn(self, result: OperationResult, warning: ConsistencyWarning | str) -> None:
        message = str(warning)
        logger.warning(message)
        result.warnings.append(message)

    def prepare(self) -> None:
        """Wipe store state left by earlier runs."""
        self.store.flush_namespace()
        self.log.clock.reset()
        self._live_ids.clear()
        self._scores.clear()
        self._inserted = 0

    def run_insert(self) -> OperationResult:
        """Insert ``number_of_items`` random blobs, routed by prepend share."""
        cfg = self.config
        mode = "parallel" if cfg.parallel_insert else "sequential"
        logger.info(
            f"Running append/prepend benchmark by inserting {cfg.number_of_items} items "
            f"({cfg.blob_size} byte blobs), {cfg.prepend_pct}% prepends, {mode}"
        )

        start = time.perf_counter()
        if cfg.parallel_insert:
            scores = self._insert_parallel()
        else:
            scores = self._insert_sequential()
        elapsed = time.perf_counter() - start

        for i, ts in enumerate(scores):
            identifier = coalesce_id(i)
            self._scores[identifier] = ts
            self._live_ids.append(identifier)
        self._inserted += len(scores)

        result = OperationResult(
            operation="insert",
            item_count=cfg.number_of_items,
            elapsed_s=elapsed,
            samples=cfg.number_of_items,
            details={"parallel": cfg.parallel_insert, "prepend_pct": cfg.prepend_pct},
        )
        logger.info(f"Inserted {cfg.number_of_items} items in {elapsed:.3f}s")
        return result

    def _insert_sequential(self) -> list[Timestamp]:
        blob_size = self.config.blob_size
        return [
            self.log.insert_at(i, coalesce_id(i), self._payload_fn(blob_size))
            for i in range(self.config.number_of_items)
        ]

    def _insert_parallel(self) -> list[Timestamp]:
        """Dispatch every insertion as its own task and wait for all of them.

        On the first failed task, tasks that have not started are cancelled,
        tasks already running are allowed to finish, and the first error is
        re-raised.
        """
        blob_size = self.config.blob_size

        def task(i: int) -> Timestamp:
            return self.log.insert_at(i, coalesce_id(i), self._payload_fn(blob_size))

        with ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="insert") as pool:
            futures: list[Future[Timestamp]] = [
                pool.submit(task, i) for i in range(self.config.number_of_items)
            ]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = next((f for f in futures if f in done and f.exception() is not None), None)
            if failed is not None:
                cancelled = sum(f.cancel() for f in pending)
                wait(pending)
                logger.error(f"Parallel insertion failed, cancelled {cancelled} pending tasks")
                raise failed.exception()
        return [f.result() for f in futures]

    def run_retrieve_all(self) -> OperationResult:
        """Read the full timeline ``number_of_retrievals`` times."""
        cfg = self.config
        expected = len(self._live_ids)
        logger.info(f"Running {cfg.number_of_retrievals} retrievals of all {expected} items")

        returned = 0
        start = time.perf_counter()
        for _ in range(cfg.number_of_retrievals):
            returned = len(self.log.retrieve_range())
        elapsed = time.perf_counter() - start

        result = OperationResult(
            operation="retrieve_all",
            item_count=expected,
            elapsed_s=elapsed,
            samples=cfg.number_of_retrievals,
            details={"items_returned": returned},
        )
        if cfg.number_of_retrievals and returned != expected:
            self._warn(result, f"Expected {expected} items from full retrieval, got {returned}")
        return result

    def run_retrieve_after(self) -> OperationResult:
        """Read the window from the middle of the inserted score range onward."""
        cfg = self.config
        min_score = self.log.clock.offset(cfg.number_of_items // 2)
        expected = sum(1 for ts in self._scores.values() if ts >= min_score)
        logger.info(f"Running {cfg.number_of_retrievals} retrievals of items after timestamp {min_score}")

        returned = 0
        start = time.perf_counter()
        for _ in range(cfg.number_of_retrievals):
            returned = len(self.log.retrieve_range(min_score, POS_INF))
        elapsed = time.perf_counter() - start

        result = OperationResult(
            operation="retrieve_after",
            item_count=expected,
            elapsed_s=elapsed,
            samples=cfg.number_of_retrievals,
            details={"min_score": min_score, "items_returned": returned},
        )
        if cfg.number_of_retrievals and returned != expected:
            self._warn(result, f"Expected {expected} items after timestamp {min_score}, got {returned}")
        return result

    def run_remove_by_id(self) -> OperationResult:
        """Remove ``items_to_remove`` items picked uniformly from the live ids."""
        cfg = self.config
        to_remove = min(cfg.items_to_remove, len(self._live_ids))
        logger.info(f"Running remove by coalesce key benchmark by removing {to_remove} items in random locations")

        result = OperationResult(operation="remove_by_id", item_count=to_remove, elapsed_s=0.0, samples=to_remove)
        start = time.perf_counter()
        for _ in range(to_remove):
            idx = self._rng.randrange(len(self._live_ids))
            identifier = self._live_ids[idx]
            self._live_ids[idx] = self._live_ids[-1]
            self._live_ids.pop()
            self._scores.pop(identifier, None)
            try:
                self.log.remove_by_id(identifier)
            except ConsistencyWarning as w:
                self._warn(result, w)
        result.elapsed_s = time.perf_counter() - start

        append_count = self.log.count(LogName.APPEND)
        prepend_count = self.log.count(LogName.PREPEND)
        expected = len(self._live_ids)
        result.details.update({"append_count": append_count, "prepend_count": prepend_count})
        if append_count + prepend_count != expected:
            self._warn(
                result,
                f"Expected {expected} items to be left, got {append_count + prepend_count} "
                f"({append_count} append and {prepend_count} prepend)",
            )
        return result

    def run_teardown(self) -> OperationResult:
        """Delete both logs and every index entry, then verify nothing is left."""
        logger.info(f"Running termination benchmark of all {self._inserted} items")

        start = time.perf_counter()
        stats = self.log.clear_all()
        elapsed = time.perf_counter() - start

        result = OperationResult(
            operation="teardown",
            item_count=self._inserted,
            elapsed_s=elapsed,
            details={
                "log_keys_deleted": stats.log_keys_deleted,
                "index_entries_deleted": stats.index_entries_deleted,
            },
        )
        remaining = self.log.count()
        leftover = next(self.log.index.iter_keys(self.config.scan_batch_size), None)
        if remaining or leftover is not None:
            self._warn(result, f"Teardown left {remaining} log entries, index key sample: {leftover}")

        self._live_ids.clear()
        self._scores.clear()
        return result

    def run_all(self) -> BenchmarkReport:
        """Prepare, then run every phase in order."""
        self.prepare()
        report = BenchmarkReport()
        report.results.append(self.run_insert())
        report.results.append(self.run_retrieve_all())
        report.results.append(self.run_retrieve_after())
        report.results.append(self.run_remove_by_id())
        report.results.append(self.run_teardown())
        return report
