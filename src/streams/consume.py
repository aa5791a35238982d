"""
Stream Consumer - CLI Entry Point
Reads a Redis stream, standalone or as a consumer group member, and prints each entry
"""

import argparse
import logging
import os
import sys

import structlog

from src.core.logger import setup_logging
from src.streams.connection import create_redis_client
from src.streams.consumer import StreamConsumer
from src.streams.models import (
    ConnectionConfig,
    ConsumerConfig,
    GroupIdentity,
    parse_start_position,
)

logger = structlog.get_logger(__name__)


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Redis stream consumer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Follow new entries of a stream
        python -m src.streams.consume events

        # Replay a stream from the beginning for 60 seconds
        python -m src.streams.consume events --start beginning --duration 60

        # Join a consumer group, draining this member's pending entries first
        python -m src.streams.consume events --group billing --member worker-1

        # Using environment variables
        export REDIS_URL=redis://redis:6379/0
        python -m src.streams.consume events
        """,
    )

    parser.add_argument("stream", help="Stream name")

    # Redis settings
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL"),
        help="Redis URL, takes precedence over host/port (default: REDIS_URL env var)",
    )
    parser.add_argument(
        "--redis-host",
        default=os.getenv("REDIS_HOST", "localhost"),
        help="Redis host (default: localhost or REDIS_HOST env var)",
    )
    parser.add_argument(
        "--redis-port",
        type=int,
        default=int(os.getenv("REDIS_PORT", "6379")),
        help="Redis port (default: 6379 or REDIS_PORT env var)",
    )
    parser.add_argument(
        "--redis-db",
        type=int,
        default=int(os.getenv("REDIS_DB", "0")),
        help="Redis database (default: 0 or REDIS_DB env var)",
    )

    # Consumer group
    parser.add_argument("--group", help="Consumer group name (requires --member)")
    parser.add_argument("--member", help="Consumer name within the group")
    parser.add_argument(
        "--skip-pending",
        action="store_true",
        help="Do not replay entries delivered to this member but never acknowledged",
    )
    parser.add_argument(
        "--no-create-stream",
        action="store_true",
        help="Fail instead of creating the stream when it does not exist",
    )

    # Consumer behavior
    parser.add_argument(
        "--start",
        default="tail",
        help="Start position: beginning, tail or an entry id (default: tail)",
    )
    parser.add_argument(
        "--count",
        type=int,
        help="Max entries per read (default: unlimited)",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=2000,
        help="Blocking read timeout in milliseconds (default: 2000)",
    )

    # Runtime settings
    parser.add_argument(
        "--duration",
        type=int,
        help="Duration to run in seconds (default: infinite)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )

    args = parser.parse_args(argv)
    if bool(args.group) != bool(args.member):
        parser.error("--group and --member must be given together")
    return args


def build_config_from_args(args) -> ConsumerConfig:
    """Build a ConsumerConfig from command-line arguments"""
    group = GroupIdentity(args.group, args.member) if args.group else None

    config = ConsumerConfig(
        count=args.count,
        group=group,
        create_stream_if_missing=not args.no_create_stream,
        process_pending=not args.skip_pending,
        start_position=parse_start_position(args.start),
        timeout_ms=args.timeout_ms,
    )

    logger.info("Configuration built from arguments", config=config)
    return config


def print_message(entry_id: str, fields: dict[str, str]):
    """Default handler: print the entry on stdout"""
    pairs = " ".join(f"{k}={v}" for k, v in fields.items())
    print(f"{entry_id} {pairs}", flush=True)


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    setup_logging(level=getattr(logging, args.log_level))

    logger.info("Starting stream consumer", stream=args.stream)

    try:
        config = build_config_from_args(args)
        redis = create_redis_client(
            ConnectionConfig(
                url=args.redis_url,
                host=args.redis_host,
                port=args.redis_port,
                db=args.redis_db,
            )
        )

        consumer = StreamConsumer(redis, args.stream, print_message, config)
        consumer.run(duration_seconds=args.duration)

        logger.info("Consumer completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Consumer failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
