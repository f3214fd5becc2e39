"""Configuration for the dual log benchmark.

Defines all tunable parameters of a benchmark run and the key layout
derived from them.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, get_type_hints

from .errors import ConfigError
from .types import LogName

STORE_BACKENDS = ("memory", "redis")
MIN_BLOB_SIZE = 8


@dataclass
class BenchmarkConfig:
    """Configuration parameters for a benchmark run.

    Attributes:
        key_base_name: Namespace prefix for every key the run touches
        number_of_items: Items inserted during the insert phase
        prepend_pct: Share (0-100) of each 100-item block routed to prepend
        blob_size: Payload size in bytes
        items_to_remove: Removals performed by identifier
        number_of_retrievals: Iterations of each retrieval benchmark
        timestamp_step: Logical clock increment per insertion
        scan_batch_size: Page size for index enumeration during teardown
        parallel_insert: Dispatch each insertion as a concurrent task
        max_workers: Worker threads used by parallel insertion
        journal_payloads: Also push payloads onto per-log journal lists
        store_backend: "memory" or "redis"
        redis_url: Connection URL for the redis backend
        store_retries: Retries per store call (0 = fail fast)
        retry_base_delay: Initial backoff delay in seconds
        retry_max_delay: Backoff ceiling in seconds
        seed: Seed for removal target selection (None = nondeterministic)
    """

    key_base_name: str = "benchmark"
    number_of_items: int = 100_000
    prepend_pct: int = 30
    blob_size: int = 1000
    items_to_remove: int = 100
    number_of_retrievals: int = 25
    timestamp_step: int = 10_000
    scan_batch_size: int = 1000
    parallel_insert: bool = False
    max_workers: int = 32
    journal_payloads: bool = False
    store_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    store_retries: int = 0
    retry_base_delay: float = 0.05
    retry_max_delay: float = 1.0
    seed: int | None = None

    def validate(self) -> BenchmarkConfig:
        """Raise ConfigError if any value is out of range."""
        if not self.key_base_name or ":" in self.key_base_name:
            raise ConfigError(f"Invalid key_base_name: {self.key_base_name!r}")
        if self.number_of_items < 0:
            raise ConfigError("number_of_items must be >= 0")
        if not 0 <= self.prepend_pct <= 100:
            raise ConfigError("prepend_pct must be within [0, 100]")
        # Payloads are sorted set members, so they must be distinct in practice
        if self.blob_size < MIN_BLOB_SIZE:
            raise ConfigError(f"blob_size must be >= {MIN_BLOB_SIZE}")
        if not 0 <= self.items_to_remove <= self.number_of_items:
            raise ConfigError("items_to_remove must be within [0, number_of_items]")
        if self.number_of_retrievals < 0:
            raise ConfigError("number_of_retrievals must be >= 0")
        if self.timestamp_step <= 0:
            raise ConfigError("timestamp_step must be positive")
        if self.scan_batch_size <= 0:
            raise ConfigError("scan_batch_size must be positive")
        if self.max_workers <= 0:
            raise ConfigError("max_workers must be positive")
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigError(f"Unknown store_backend {self.store_backend!r}, expected one of {STORE_BACKENDS}")
        if self.store_retries < 0:
            raise ConfigError("store_retries must be >= 0")
        if self.retry_base_delay < 0 or self.retry_max_delay < 0:
            raise ConfigError("retry delays must be >= 0")
        return self

    # Key layout

    def log_key(self, log: LogName) -> str:
        return f"{self.key_base_name}:{log.value}"

    def journal_key(self, log: LogName) -> str:
        return f"{self.key_base_name}:journal:{log.value}"

    @property
    def coalesce_prefix(self) -> str:
        return f"{self.key_base_name}:coalesce:"

    def with_overrides(self, **overrides: Any) -> BenchmarkConfig:
        """Return a copy with non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(path: Path) -> BenchmarkConfig:
    """Load a BenchmarkConfig from the ``[benchmark]`` table of a TOML file."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    table = data.get("benchmark", {})
    known = {f.name for f in fields(BenchmarkConfig)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    hints = get_type_hints(BenchmarkConfig)
    for name, value in table.items():
        if not _matches_type(value, hints[name]):
            raise ConfigError(f"Config key {name!r} in {path} has wrong type {type(value).__name__}")
    return BenchmarkConfig(**table).validate()


def _matches_type(value: Any, expected: Any) -> bool:
    # bool is an int subclass; only accept it for bool fields
    if isinstance(value, bool):
        return expected is bool
    if expected is float and isinstance(value, int):
        return True
    return isinstance(value, expected)
