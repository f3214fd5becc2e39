# CLI using argparse that runs the benchmark phases and prints the report.
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dual_log_bench.components import open_store
from dual_log_bench.core.config import STORE_BACKENDS, BenchmarkConfig, load_config
from dual_log_bench.core.driver import BenchmarkDriver
from dual_log_bench.core.errors import CallerError, ConfigError, StoreCommunicationError

EXIT_CONFIG_ERROR = 2
EXIT_STORE_ERROR = 3
EXIT_CALLER_ERROR = 4


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dual-log-bench",
        description="Benchmark an append/prepend ordered log on a sorted-set store",
    )
    p.add_argument("--config", type=Path, help="TOML file with a [benchmark] table")
    p.add_argument("--backend", choices=STORE_BACKENDS, help="Store backend (default: memory)")
    p.add_argument("--redis-url", type=str, help="Redis URL for the redis backend")
    p.add_argument("--items", type=int, help="Number of items to insert")
    p.add_argument("--prepend-pct", type=int, help="Percentage of each 100 items routed to prepend")
    p.add_argument("--blob-size", type=int, help="Payload size in bytes")
    p.add_argument("--remove", type=int, help="Items to remove by coalesce key (must not exceed --items; clamped to --items when omitted)")
    p.add_argument("--retrievals", type=int, help="Iterations of each retrieval benchmark")
    p.add_argument("--parallel", action="store_true", default=None, help="Insert items concurrently")
    p.add_argument("--workers", type=int, help="Worker threads for parallel insertion")
    p.add_argument("--journal", action="store_true", default=None, help="Also push payloads onto journal lists")
    p.add_argument("--retries", type=int, help="Retries per store call (default: fail fast)")
    p.add_argument("--seed", type=int, help="Seed for removal target selection")
    p.add_argument("--json", action="store_true", help="Print the report as JSON")
    p.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return p


def resolve_config(args: argparse.Namespace) -> BenchmarkConfig:
    base = load_config(args.config) if args.config else BenchmarkConfig()
    cfg = base.with_overrides(
        store_backend=args.backend,
        redis_url=args.redis_url,
        number_of_items=args.items,
        prepend_pct=args.prepend_pct,
        blob_size=args.blob_size,
        items_to_remove=args.remove,
        number_of_retrievals=args.retrievals,
        parallel_insert=args.parallel,
        max_workers=args.workers,
        journal_payloads=args.journal,
        store_retries=args.retries,
        seed=args.seed,
    )
    if args.items is not None and args.remove is None:
        cfg.items_to_remove = min(cfg.items_to_remove, cfg.number_of_items)
    return cfg.validate()


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger("dual_log_bench")

    try:
        cfg = resolve_config(args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    try:
        store = open_store(cfg)
        try:
            report = BenchmarkDriver(store, cfg).run_all()
        finally:
            store.close()
    except StoreCommunicationError as e:
        logger.error(f"Store communication failed: {e}")
        return EXIT_STORE_ERROR
    except CallerError as e:
        logger.error(f"Caller error: {e}")
        return EXIT_CALLER_ERROR

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report.render_text())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
