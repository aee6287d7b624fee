#!/usr/bin/env python3
"""
Operate the dark pool from the command line.

Commands:
  init-db     Create the pool tables for the configured database.
  run-cycle   Run one batch cycle now and print its summary as JSON.
  reconcile   Finalize open batches left by an interrupted cycle.
  serve       Run the HTTP API with the batch scheduler enabled.

Usage:
  python3 scripts/darkpool_cli.py [--config darkpool.yaml] run-cycle
  python3 scripts/darkpool_cli.py serve --host 0.0.0.0 --port 8000

Settings come from defaults, then the YAML file (--config or
DARKPOOL_CONFIG), then unprefixed environment variables such as
MAX_BATCH_SIZE or DATABASE_URL.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

import yaml  # noqa: E402

from darkpool_config.loader import load_config  # noqa: E402
from darkpool_kernel.exceptions import DarkPoolError  # noqa: E402
from darkpool_kernel.logging_config import configure_logging, get_logger  # noqa: E402

logger = get_logger("cli")


def cmd_init_db(args, config) -> int:
    from darkpool_kernel.db.engine import create_tables, init_engine_from_url

    init_engine_from_url(config.database_url)
    create_tables()
    print(f"Tables created for {config.database_url}")
    return 0


def cmd_run_cycle(args, config) -> int:
    from darkpool_batch.orchestrator import PoolOrchestrator

    orchestrator = PoolOrchestrator.from_config(config)
    try:
        result = orchestrator.cycle.run()
    finally:
        orchestrator.close()
    print(json.dumps(result.as_dict(), indent=2))
    return 1 if result.error else 0


def cmd_reconcile(args, config) -> int:
    from darkpool_batch.orchestrator import PoolOrchestrator

    orchestrator = PoolOrchestrator.from_config(config)
    try:
        finalized = orchestrator.cycle.reconcile()
    finally:
        orchestrator.close()
    print(json.dumps(
        {"finalized": [str(b.batch_id) for b in finalized]}, indent=2,
    ))
    return 0


def cmd_serve(args, config) -> int:
    import uvicorn

    from darkpool_api.app import create_app

    app = create_app(config=config, start_scheduler=not args.no_scheduler)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Agent dark pool operations")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--log-level", default=None, help="Override log level")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables").set_defaults(func=cmd_init_db)
    sub.add_parser("run-cycle", help="Run one batch cycle").set_defaults(func=cmd_run_cycle)
    sub.add_parser("reconcile", help="Finalize open batches").set_defaults(func=cmd_reconcile)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument(
        "--no-scheduler", action="store_true",
        help="Serve the API without running batch cycles",
    )
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except (DarkPoolError, OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(level=args.log_level or config.log_level)
    try:
        return args.func(args, config)
    except DarkPoolError as exc:
        logger.error("cli_command_failed", extra={"command": args.command}, exc_info=exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
