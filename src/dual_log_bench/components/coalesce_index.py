"""Coalesce index: identifier -> placement of a live item."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..core.errors import CallerError
from ..core.types import Placement
from ..interfaces.store import OrderedLogStore

logger = logging.getLogger(__name__)


class CoalesceIndex:
    """Secondary index locating items without scanning the logs.

    Args:
        store: Backing ordered log store
        prefix: Key prefix, e.g. "benchmark:coalesce:"

    Each entry is a scalar key ``<prefix><identifier>`` holding a
    ``"<log-name>:<score>"`` descriptor.
    """

    def __init__(self, store: OrderedLogStore, prefix: str):
        self._store = store
        self.prefix = prefix

    def key_for(self, identifier: str) -> str:
        return f"{self.prefix}{identifier}"

    def record(self, identifier: str, placement: Placement) -> None:
        """Point identifier at placement, replacing any previous entry."""
        self._store.set(self.key_for(identifier), placement.descriptor())

    def lookup(self, identifier: str) -> Placement:
        """Return the placement for identifier.

        Raises:
            CallerError: If identifier is unknown or already removed
            IndexCorruptionError: If the stored descriptor is malformed
        """
        raw = self._store.get(self.key_for(identifier))
        if raw is None:
            raise CallerError(f"Unknown coalesce identifier: {identifier!r}")
        return Placement.parse(raw)

    def discard(self, identifier: str) -> bool:
        """Drop the entry for identifier; return whether it existed."""
        return self._store.delete(self.key_for(identifier)) > 0

    def iter_keys(self, batch_size: int = 1000) -> Iterator[str]:
        """Yield every index key, paging until the store reports completion."""
        cursor = 0
        pattern = f"{self.prefix}*"
        while True:
            keys, cursor = self._store.scan(cursor, pattern, batch_size)
            yield from keys
            if cursor == 0:
                break

    def clear(self, batch_size: int = 1000) -> int:
        """Delete every index entry in batches; return the number deleted.

        Deleting while scanning may move not-yet-visited keys behind the
        cursor on some stores, so passes repeat until one deletes nothing.
        """
        total = 0
        while True:
            deleted_this_pass = 0
            cursor = 0
            pattern = f"{self.prefix}*"
            while True:
                keys, cursor = self._store.scan(cursor, pattern, batch_size)
                if keys:
                    deleted_this_pass += self._store.delete(*keys)
                if cursor == 0:
                    break
            total += deleted_this_pass
            if deleted_this_pass == 0:
                break
        logger.info(f"Cleared {total} coalesce index entries")
        return total
