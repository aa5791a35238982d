"""
Redis stream producer and consumers (standalone or consumer group).
"""

from .bootstrap import ensure_stream_and_group
from .connection import create_redis_client
from .consumer import StreamConsumer
from .errors import InitializationError, ProduceError, ReadError, StreamError
from .models import (
    ConnectionConfig,
    ConsumerConfig,
    EndOfStream,
    ExplicitId,
    GroupIdentity,
    Message,
    StartOfStream,
    StartPosition,
    parse_start_position,
)
from .positions import resolve_positions
from .producer import produce

__all__ = [
    "ConnectionConfig",
    "ConsumerConfig",
    "EndOfStream",
    "ExplicitId",
    "GroupIdentity",
    "InitializationError",
    "Message",
    "ProduceError",
    "ReadError",
    "StartOfStream",
    "StartPosition",
    "StreamConsumer",
    "StreamError",
    "create_redis_client",
    "ensure_stream_and_group",
    "parse_start_position",
    "produce",
    "resolve_positions",
]

__version__ = "1.0.0"
