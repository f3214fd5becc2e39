"""Common type definitions for the dual log.

Defines fundamental types used across all components.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import IndexCorruptionError

# Core primitive types
Score = float | int
Member = bytes
Timestamp = int

NEG_INF: float = float("-inf")
POS_INF: float = float("inf")


class LogName(Enum):
    """The two ordered logs making up one timeline."""

    APPEND = "append"
    PREPEND = "prepend"


@dataclass(frozen=True)
class Placement:
    """Where a live item currently lives: its log and its score."""

    log: LogName
    score: Timestamp

    def descriptor(self) -> str:
        """Render as ``"<log-name>:<score>"``."""
        return f"{self.log.value}:{self.score}"

    @classmethod
    def parse(cls, text: str) -> Placement:
        """Inverse of :meth:`descriptor`."""
        log_part, sep, score_part = text.partition(":")
        if not sep:
            raise IndexCorruptionError(f"Malformed placement descriptor: {text!r}")
        try:
            log = LogName(log_part)
        except ValueError as e:
            raise IndexCorruptionError(f"Unknown log name in descriptor: {text!r}") from e
        try:
            score = int(score_part)
        except ValueError as e:
            raise IndexCorruptionError(f"Non-integer score in descriptor: {text!r}") from e
        return cls(log=log, score=score)


def route_for_index(index: int, prepend_pct: int) -> LogName:
    """Pick the target log for the ``index``-th insertion.

    Exactly ``prepend_pct`` of every consecutive block of 100 insertions
    goes to the prepend log.
    """
    if not 0 <= prepend_pct <= 100:
        raise ValueError(f"prepend_pct must be within [0, 100], got {prepend_pct}")  # noqa: TRY003
    return LogName.PREPEND if index % 100 < prepend_pct else LogName.APPEND
