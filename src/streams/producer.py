"""
Appending entries to a Redis stream.
"""

from typing import Optional

import structlog
from redis import Redis
from redis.exceptions import RedisError

from .errors import ProduceError

logger = structlog.get_logger(__name__)


def produce(
    redis: Redis, stream: str, fields: dict[str, str], maxlen: Optional[int] = None
) -> str:
    """Append a new entry to a stream and return its id.

    Args:
        redis: Redis client
        stream: Stream name, created by Redis on first append
        fields: Field/value pairs of the entry
        maxlen: Optional approximate cap on the stream length
    """
    try:
        entry_id = redis.xadd(stream, fields, maxlen=maxlen, approximate=True)
    except RedisError as e:
        command = f"XADD {stream} * " + " ".join(f"{k} {v}" for k, v in fields.items())
        logger.error("Failed to append to stream", stream=stream, error=str(e))
        raise ProduceError("Failed to run redis command", command) from e

    if isinstance(entry_id, bytes):
        entry_id = entry_id.decode("utf-8")

    logger.debug("Entry appended", stream=stream, id=entry_id)
    return entry_id
