"""
queueops command line entrypoint
Runs a redrive locally, or feeds a JSON event file through the consumer
"""

import argparse
import json
import sys
from typing import List, Optional

import structlog

from queueops.config.loader import load_config, load_consumer_settings
from queueops.consumer.processor import handle_batch
from queueops.errors import ConfigurationError, RedriveError
from queueops.observability.logging import configure_logging
from queueops.observability.metrics import start_metrics_server
from queueops.observability.tracing import init_tracing
from queueops.redrive.engine import RedriveEngine

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="queueops", description="Batch consumer and DLQ redrive tools"
    )
    parser.add_argument("--config", help="Path to YAML configuration file")
    subcommands = parser.add_subparsers(dest="command", required=True)

    redrive_parser = subcommands.add_parser(
        "redrive", help="Move all messages from the DLQ back to the main queue"
    )
    redrive_parser.add_argument(
        "--metrics", action="store_true", help="Expose Prometheus metrics while running"
    )

    consume_parser = subcommands.add_parser(
        "consume", help="Process a JSON event file and print the failure report"
    )
    consume_parser.add_argument("event_file", help="Path to event JSON with a Records list")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entrypoint

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.command == "redrive" else None
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if config is not None:
        configure_logging(config.observability.log_level, config.observability.log_format)
        if config.observability.enable_tracing:
            init_tracing(enable_console_export=True)
    else:
        configure_logging()

    if args.command == "consume":
        with open(args.event_file, encoding="utf-8") as f:
            event = json.load(f)
        settings = load_consumer_settings()
        print(json.dumps(handle_batch(event, failure_marker=settings.failure_marker)))
        return 0

    if args.metrics:
        start_metrics_server(port=config.observability.metrics_port)

    try:
        summary = RedriveEngine.from_settings(config).run()
    except RedriveError as e:
        logger.error("Redrive failed", error=str(e))
        return 1

    print(json.dumps(summary.to_dict()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
