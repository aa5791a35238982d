"""
Stream Producer - CLI Entry Point
Appends one entry to a Redis stream from key=value pairs
"""

import argparse
import logging
import os
import sys

import structlog

from src.core.logger import setup_logging
from src.streams.connection import create_redis_client
from src.streams.models import ConnectionConfig
from src.streams.producer import produce

logger = structlog.get_logger(__name__)


def parse_fields(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` arguments into an entry mapping"""
    fields = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        fields[key] = value
    return fields


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Redis stream producer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
            Examples:
            # Append one entry
            python -m src.streams.publish events temperature=31 unit=celsius

            # Keep the stream around 10000 entries
            python -m src.streams.publish events temperature=31 --maxlen 10000
        """,
    )

    parser.add_argument("stream", help="Stream name")
    parser.add_argument("fields", nargs="+", help="Entry fields as key=value")
    parser.add_argument("--maxlen", type=int, help="Approximate max stream length")
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL"),
        help="Redis URL (default: REDIS_URL env var, else localhost:6379)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    setup_logging(level=getattr(logging, args.log_level))

    try:
        fields = parse_fields(args.fields)
        redis = create_redis_client(ConnectionConfig(url=args.redis_url))
        entry_id = produce(redis, args.stream, fields, maxlen=args.maxlen)
        print(entry_id)
        return 0

    except Exception as e:
        logger.error("Producer failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
