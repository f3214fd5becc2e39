"""Integration tests for the benchmark driver.

Tests cover:
1. Score uniqueness and split ratio across a run
2. Removal correctness and count conservation
3. Teardown completeness
4. Parallel insertion and its failure policy
5. Consistency warnings recovered inside a phase
"""

import pytest

from dual_log_bench.components.memory_store import InMemoryOrderedLogStore
from dual_log_bench.core.config import BenchmarkConfig
from dual_log_bench.core.driver import BenchmarkDriver, coalesce_id
from dual_log_bench.core.errors import CallerError, StoreCommunicationError
from dual_log_bench.core.types import LogName


@pytest.fixture
def store():
    return InMemoryOrderedLogStore()


@pytest.fixture
def config():
    return BenchmarkConfig(
        number_of_items=200,
        prepend_pct=30,
        blob_size=16,
        items_to_remove=50,
        number_of_retrievals=3,
        seed=7,
    ).validate()


@pytest.fixture
def driver(store, config):
    return BenchmarkDriver(store, config)


def test_prepare_flushes_previous_state(store, driver):
    """Test that prepare wipes leftovers from earlier runs."""
    store.set("stale", "x")
    driver.prepare()
    assert store.get("stale") is None


def test_insert_assigns_unique_scores_and_split(driver):
    """Test that every item gets a distinct score and the split is exact."""
    driver.prepare()
    result = driver.run_insert()

    scores = [driver.score_of(coalesce_id(i)) for i in range(200)]
    assert len(set(scores)) == 200
    assert driver.log.count(LogName.PREPEND) == 60
    assert driver.log.count(LogName.APPEND) == 140
    assert result.item_count == 200
    assert result.samples == 200
    assert result.warnings == []


def test_retrievals_return_every_item(driver):
    """Test full and windowed retrieval counts."""
    driver.prepare()
    driver.run_insert()

    full = driver.run_retrieve_all()
    after = driver.run_retrieve_after()

    assert full.details["items_returned"] == 200
    assert full.samples == 3
    assert full.warnings == []
    # Window starts at the 100th score, so the newer half is returned
    assert after.details["items_returned"] == 100
    assert after.details["min_score"] == driver.score_of(coalesce_id(100))
    assert after.warnings == []


def test_remove_by_id_conserves_counts(driver):
    """Test that N - K items remain after K removals."""
    driver.prepare()
    driver.run_insert()
    result = driver.run_remove_by_id()

    assert result.item_count == 50
    assert result.warnings == []
    assert result.details["append_count"] + result.details["prepend_count"] == 150
    assert driver.log.count() == 150
    assert len(driver.live_ids) == 150


def test_removed_ids_are_gone_and_live_ids_remain(driver):
    """Test that removal targets come from the live id space only."""
    driver.prepare()
    driver.run_insert()
    driver.run_remove_by_id()

    live = set(driver.live_ids)
    removed = {coalesce_id(i) for i in range(200)} - live
    assert len(removed) == 50
    for identifier in removed:
        with pytest.raises(CallerError):
            driver.log.index.lookup(identifier)
    for identifier in live:
        assert driver.log.index.lookup(identifier).score == driver.score_of(identifier)


def test_removal_targets_are_seeded(store, config):
    """Test that the same seed removes the same identifiers."""
    first = BenchmarkDriver(store, config)
    first.prepare()
    first.run_insert()
    first.run_remove_by_id()

    second = BenchmarkDriver(InMemoryOrderedLogStore(), config)
    second.prepare()
    second.run_insert()
    second.run_remove_by_id()

    assert sorted(first.live_ids) == sorted(second.live_ids)


def test_teardown_leaves_nothing(store, driver):
    """Test that teardown removes both logs and every index entry."""
    driver.prepare()
    driver.run_insert()
    driver.run_remove_by_id()
    result = driver.run_teardown()

    assert result.warnings == []
    assert result.item_count == 200
    assert result.details["log_keys_deleted"] == 2
    assert result.details["index_entries_deleted"] == 150
    assert driver.log.count() == 0
    keys, _ = store.scan(0, "benchmark:*", 10_000)
    assert keys == []


def test_run_all_produces_report(driver):
    """Test the full phase sequence."""
    report = driver.run_all()

    assert [r.operation for r in report.results] == [
        "insert",
        "retrieve_all",
        "retrieve_after",
        "remove_by_id",
        "teardown",
    ]
    assert not report.has_warnings
    assert "Removing 50 items by coalesce key" in report.render_text()


def test_parallel_insert(store, config):
    """Test that concurrent insertion keeps scores unique and the split exact."""
    config.number_of_items = 300
    config.parallel_insert = True
    config.max_workers = 8
    driver = BenchmarkDriver(store, config)
    driver.prepare()
    result = driver.run_insert()

    scores = [driver.score_of(coalesce_id(i)) for i in range(300)]
    assert len(set(scores)) == 300
    assert driver.log.count(LogName.PREPEND) == 90
    assert driver.log.count(LogName.APPEND) == 210
    assert result.details["parallel"] is True
    for i in (0, 150, 299):
        placement = driver.log.index.lookup(coalesce_id(i))
        assert placement.score == driver.score_of(coalesce_id(i))


def test_parallel_run_all_journals_payloads(store, config):
    """Test a parallel run with journaling enabled tears down cleanly."""
    config.parallel_insert = True
    config.journal_payloads = True
    driver = BenchmarkDriver(store, config)
    driver.prepare()
    driver.run_insert()

    assert len(driver.log.journal(LogName.PREPEND)) == 60
    assert len(driver.log.journal(LogName.APPEND)) == 140

    driver.run_remove_by_id()
    result = driver.run_teardown()
    assert result.details["log_keys_deleted"] == 4
    assert result.warnings == []


def test_parallel_insert_failure_propagates(config):
    """Test that a failing task aborts the phase with the store error."""
    config.parallel_insert = True
    config.max_workers = 4
    store = InMemoryOrderedLogStore(fail_on={"set"})
    driver = BenchmarkDriver(store, config)

    with pytest.raises(StoreCommunicationError):
        driver.run_insert()
    assert driver.live_ids == []


def test_sequential_insert_fails_fast(config):
    """Test that the first store failure ends the sequential phase."""
    store = InMemoryOrderedLogStore(fail_on={"zadd"})
    driver = BenchmarkDriver(store, config)

    with pytest.raises(StoreCommunicationError):
        driver.run_insert()
    assert store.calls["zadd"] == 1
    assert "set" not in store.calls


def test_score_collisions_are_warned_not_fatal(store, driver):
    """Test that removal count violations are recorded as warnings."""
    driver.prepare()
    driver.run_insert()
    for identifier in driver.live_ids:
        placement = driver.log.index.lookup(identifier)
        store.zadd(driver.config.log_key(placement.log), placement.score, b"stray-" + identifier.encode())

    result = driver.run_remove_by_id()

    removal_warnings = [w for w in result.warnings if w.startswith("Expected 1 item")]
    assert len(removal_warnings) == 50
    assert any("items to be left" in w for w in result.warnings)
    assert len(driver.live_ids) == 150


def test_retrieval_mismatch_is_warned(store, driver):
    """Test that retrieval count mismatches are recorded as warnings."""
    driver.prepare()
    driver.run_insert()
    store.zadd("benchmark:append", 1, b"not-indexed-orphan")

    result = driver.run_retrieve_all()
    assert result.warnings == ["Expected 200 items from full retrieval, got 201"]


def test_repeated_run_all_anchors_window_to_current_run(driver):
    """Test that a second run on the same driver windows over its own scores."""
    first = driver.run_all()
    second = driver.run_all()

    assert first.get("retrieve_after").details["items_returned"] == 100
    assert second.get("retrieve_after").details["items_returned"] == 100
    assert second.get("retrieve_after").details["min_score"] == driver.log.clock.offset(100)
    assert not second.has_warnings
