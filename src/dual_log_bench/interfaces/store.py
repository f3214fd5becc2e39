"""Protocol definition for the ordered log store."""

from __future__ import annotations

from typing import Protocol

from ..core.types import Member, Score


class OrderedLogStore(Protocol):
    """Remote store offering sorted sets, scalar keys and lists.

    Every call is an independent round trip; nothing is atomic across calls.
    Implementations raise StoreCommunicationError on any failure.
    """

    def zadd(self, name: str, score: Score, member: Member) -> None:
        """Insert member at score, or move an existing member to score."""
        ...

    def zrange_asc(self, name: str, min_score: Score, max_score: Score) -> list[Member]:
        """Members with min_score <= score <= max_score, ascending."""
        ...

    def zrange_desc(self, name: str, min_score: Score, max_score: Score) -> list[Member]:
        """Members with min_score <= score <= max_score, descending."""
        ...

    def zrem_range(self, name: str, min_score: Score, max_score: Score) -> int:
        """Remove members in the inclusive score range; return count removed."""
        ...

    def zcount(self, name: str, min_score: Score, max_score: Score) -> int:
        """Count members in the inclusive score range."""
        ...

    def get(self, key: str) -> str | None:
        """Return the scalar value at key or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a scalar value."""
        ...

    def push_left(self, key: str, value: Member) -> int:
        """Prepend to the list at key; return new length."""
        ...

    def push_right(self, key: str, value: Member) -> int:
        """Append to the list at key; return new length."""
        ...

    def lrange(self, key: str) -> list[Member]:
        """Return the whole list at key, front first."""
        ...

    def scan(self, cursor: int, pattern: str, batch_size: int) -> tuple[list[str], int]:
        """Page through keys matching a glob pattern.

        Returns (keys, next_cursor); next_cursor == 0 means the scan is done.
        """
        ...

    def delete(self, *keys: str) -> int:
        """Delete any kind of key; return how many existed."""
        ...

    def flush_namespace(self) -> None:
        """Wipe all state (test isolation)."""
        ...

    def close(self) -> None:
        """Release connections."""
        ...

