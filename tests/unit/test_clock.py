"""Unit tests for the logical clock."""

import threading

import pytest

from dual_log_bench.core.clock import LogicalClock


def test_clock_starts_at_seed_and_advances_by_step():
    """Test that values start at the seed and grow by one step per call."""
    clock = LogicalClock(step=10_000, seed=1_000)
    assert [clock.next() for _ in range(3)] == [1_000, 11_000, 21_000]
    assert clock.peek() == 31_000


def test_clock_defaults_to_wall_clock_seed():
    """Test that an unseeded clock starts from a nanosecond timestamp."""
    clock = LogicalClock()
    assert clock.seed > 1_000_000_000_000_000_000
    assert clock.next() == clock.seed


def test_clock_offset():
    """Test that offset() predicts the score of the n-th call."""
    clock = LogicalClock(step=5, seed=100)
    assert clock.offset(4) == 120
    values = [clock.next() for _ in range(5)]
    assert values[4] == clock.offset(4)


@pytest.mark.parametrize("step", [0, -10])
def test_clock_rejects_non_positive_step(step):
    """Test that the step must be positive."""
    with pytest.raises(ValueError):
        LogicalClock(step=step)


def test_clock_values_unique_across_threads():
    """Test that concurrent callers never observe the same value."""
    clock = LogicalClock(step=10_000, seed=0)
    seen: list[list[int]] = [[] for _ in range(8)]

    def worker(slot: int) -> None:
        for _ in range(1000):
            seen[slot].append(clock.next())

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    values = [v for chunk in seen for v in chunk]
    assert len(values) == 8000
    assert len(set(values)) == 8000
    assert sorted(values) == [i * 10_000 for i in range(8000)]


def test_clock_reset_restarts_from_new_seed():
    """Test that reset() moves both the seed and the next value."""
    clock = LogicalClock(step=10, seed=0)
    clock.next()
    clock.next()
    clock.reset(seed=500)
    assert clock.seed == 500
    assert clock.next() == 500
    assert clock.offset(3) == 530
