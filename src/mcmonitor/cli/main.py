"""
Command-line interface for the mcmonitor exporter.

This module provides the CLI entry point: it loads configuration, wires the
status aggregator, and either prints one snapshot as JSON or serves the
Prometheus endpoint until interrupted.
"""

import argparse
import json
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from ..aggregation import StatusAggregator
from ..config import get_config, set_config_path
from ..exposition import MetricsExporter, StatusCollector
from ..validation import ValidationError, handle_cli_error

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcmonitor",
        description="Expose health metrics of locally hosted Minecraft servers.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config.toml (defaults to conf/config.toml).",
    )
    parser.add_argument(
        "-r",
        "--root",
        type=Path,
        help="Directory containing one subdirectory per server; overrides monitor.discovery.servers_root.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single scrape, print it as JSON and exit.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level.",
    )
    return parser


def run_once(aggregator: StatusAggregator) -> int:
    """
    Print one snapshot to stdout.

    Returns:
        Process exit code: 0 on success, 1 if the scrape failed.
    """
    try:
        statuses = aggregator.snapshot()
    except Exception as e:
        logger.error(f"Scrape failed: {e}")
        return 1

    document = {name: status.to_dict() for name, status in statuses.items()}
    print(json.dumps(document, indent=2, sort_keys=True))
    return 0


def serve(aggregator: StatusAggregator, host: str, port: int) -> int:
    """Serve metrics until SIGINT or SIGTERM."""
    stop_requested = threading.Event()

    def signal_handler(signum, frame):
        logger.info(f"Signal {signal.strsignal(signum)} received. Shutting down...")
        stop_requested.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    exporter = MetricsExporter(StatusCollector(aggregator.snapshot), host=host, port=port)
    try:
        exporter.start()
    except OSError as e:
        handle_cli_error(error=e, context=f"binding [{host}]:{port}", exit_code=1, logger=logger)

    try:
        stop_requested.wait()
    finally:
        exporter.stop()
    return 0


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for mcmonitor.

    Raises:
        SystemExit: With the exit code of the selected mode, or 1 on
            configuration errors.
    """
    args = build_parser().parse_args(argv)

    if args.config is not None:
        set_config_path(args.config)

    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    logging.getLogger().setLevel(args.log_level or app_config.log_level)

    if args.root is not None:
        app_config.discovery.servers_root = args.root.expanduser()

    aggregator = StatusAggregator.from_config(app_config)

    if args.once:
        sys.exit(run_once(aggregator))

    sys.exit(serve(aggregator, app_config.exporter.host, app_config.exporter.port))


if __name__ == "__main__":
    main_cli()
