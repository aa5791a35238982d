"""
Stream and consumer group creation.
"""

import structlog
from redis import Redis
from redis.exceptions import RedisError, ResponseError

from .errors import InitializationError

logger = structlog.get_logger(__name__)

BUSYGROUP = "BUSYGROUP"


def ensure_stream_and_group(
    redis: Redis,
    stream: str,
    group_name: str,
    anchor: str,
    create_stream_if_missing: bool,
) -> bool:
    """Create the consumer group (and the stream if requested).

    An existing group is left untouched, so calling this repeatedly or from
    several members at once is safe.

    Returns:
        True if the group was created, False if it already existed.

    Raises:
        InitializationError: Redis refused to create the group for any other
            reason, e.g. the stream is missing and ``create_stream_if_missing``
            is False.
    """
    command = f"XGROUP CREATE {stream} {group_name} {anchor}"
    if create_stream_if_missing:
        command += " MKSTREAM"

    try:
        redis.xgroup_create(stream, group_name, id=anchor, mkstream=create_stream_if_missing)
    except RedisError as e:
        if isinstance(e, ResponseError) and str(e).startswith(BUSYGROUP):
            logger.debug("Consumer group already exists", stream=stream, group=group_name)
            return False
        logger.error("Failed to create consumer group", command=command, error=str(e))
        raise InitializationError("Failed to run redis command", command) from e

    logger.info("Consumer group created", stream=stream, group=group_name, anchor=anchor)
    return True
