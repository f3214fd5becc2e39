"""Unit tests for the coalesce index."""

import pytest

from dual_log_bench.components.coalesce_index import CoalesceIndex
from dual_log_bench.components.memory_store import InMemoryOrderedLogStore
from dual_log_bench.core.errors import CallerError, IndexCorruptionError
from dual_log_bench.core.types import LogName, Placement


@pytest.fixture
def store():
    return InMemoryOrderedLogStore()


@pytest.fixture
def index(store):
    return CoalesceIndex(store, "benchmark:coalesce:")


def test_record_writes_descriptor(store, index):
    """Test that entries are stored as log-name:score strings."""
    index.record("coalesce_0", Placement(LogName.PREPEND, 1234))
    assert store.get("benchmark:coalesce:coalesce_0") == "prepend:1234"


def test_lookup_round_trip(index):
    """Test lookup returns the recorded placement."""
    index.record("coalesce_7", Placement(LogName.APPEND, 99))
    assert index.lookup("coalesce_7") == Placement(LogName.APPEND, 99)


def test_lookup_unknown_raises_caller_error(index):
    """Test that unknown identifiers are caller errors."""
    with pytest.raises(CallerError):
        index.lookup("nope")


def test_lookup_corrupt_entry(store, index):
    """Test that unparsable entries raise IndexCorruptionError."""
    store.set(index.key_for("bad"), "sideways:12")
    with pytest.raises(IndexCorruptionError):
        index.lookup("bad")


def test_discard(index):
    """Test that discard removes the entry and reports whether it existed."""
    index.record("a", Placement(LogName.APPEND, 1))
    assert index.discard("a") is True
    assert index.discard("a") is False
    with pytest.raises(CallerError):
        index.lookup("a")


def test_iter_keys_only_yields_index_keys(store, index):
    """Test enumeration is limited to the index prefix."""
    for i in range(12):
        index.record(f"coalesce_{i}", Placement(LogName.APPEND, i))
    store.zadd("benchmark:append", 1, b"x")
    store.set("other:coalesce:1", "append:1")

    keys = list(index.iter_keys(batch_size=5))
    assert sorted(keys) == sorted(f"benchmark:coalesce:coalesce_{i}" for i in range(12))


def test_clear_deletes_all_entries_in_batches(store, index):
    """Test that clear removes every entry even when pages shift under deletion."""
    for i in range(25):
        index.record(f"coalesce_{i}", Placement(LogName.APPEND, i))
    store.set("other:key", "keep")

    assert index.clear(batch_size=10) == 25
    assert list(index.iter_keys()) == []
    assert store.get("other:key") == "keep"


def test_clear_empty_index(index):
    """Test clear on an empty index."""
    assert index.clear() == 0
