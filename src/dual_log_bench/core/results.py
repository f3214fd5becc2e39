"""Structured timing results returned by the benchmark driver."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class OperationResult:
    """Timing of one measured benchmark phase.

    Attributes:
        operation: Phase name (insert, retrieve_all, ...)
        item_count: Items the phase operated on
        elapsed_s: Wall time of the whole phase
        samples: Timed units the average is taken over (items or iterations)
        warnings: Consistency warnings raised and recovered during the phase
        details: Phase-specific extras (counts, window bounds, ...)
    """

    operation: str
    item_count: int
    elapsed_s: float
    samples: int = 1
    warnings: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def average_s(self) -> float:
        return self.elapsed_s / max(1, self.samples)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["average_s"] = self.average_s
        return d


def _fmt(seconds: float) -> str:
    if seconds >= 1.0:
        return f"{seconds:.3f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds * 1e6:.3f}µs"


@dataclass
class BenchmarkReport:
    """Ordered collection of phase results for one run."""

    results: list[OperationResult] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return any(r.warnings for r in self.results)

    def get(self, operation: str) -> OperationResult | None:
        for r in self.results:
            if r.operation == operation:
                return r
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"results": [r.to_dict() for r in self.results]}

    def render_text(self) -> str:
        """Human-readable summary, one paragraph per phase."""
        lines: list[str] = []
        for r in self.results:
            if r.operation == "insert":
                mode = "parallel" if r.details.get("parallel") else "sequential"
                lines.append(
                    f"Appending/prepending {r.item_count} items ({mode}) took {_fmt(r.elapsed_s)}, "
                    f"average duration was {_fmt(r.average_s)}"
                )
            elif r.operation == "retrieve_all":
                lines.append(
                    f"Retrieving all {r.item_count} items took {_fmt(r.elapsed_s)} for "
                    f"{r.samples} iterations, average duration was {_fmt(r.average_s)}"
                )
            elif r.operation == "retrieve_after":
                lines.append(
                    f"Retrieving items after timestamp {r.details.get('min_score')} took "
                    f"{_fmt(r.elapsed_s)} for {r.samples} iterations, "
                    f"average duration was {_fmt(r.average_s)}"
                )
            elif r.operation == "remove_by_id":
                lines.append(
                    f"Removing {r.item_count} items by coalesce key took {_fmt(r.elapsed_s)}, "
                    f"average duration was {_fmt(r.average_s)}"
                )
            elif r.operation == "teardown":
                lines.append(f"Termination of all {r.item_count} items took {_fmt(r.elapsed_s)}")
            else:
                lines.append(f"{r.operation}: {r.item_count} items in {_fmt(r.elapsed_s)}")
            for w in r.warnings:
                lines.append(f"  WARN: {w}")
        return "\n".join(lines)
