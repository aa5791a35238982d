"""
Redis client creation for stream producers and consumers.
"""

import redis
import structlog

from .models import ConnectionConfig

logger = structlog.get_logger(__name__)


def create_redis_client(config: ConnectionConfig) -> redis.Redis:
    """Open a Redis client and check it answers PING"""
    try:
        if config.url:
            client = redis.Redis.from_url(config.url, decode_responses=True)
        else:
            client = redis.Redis(
                host=config.host,
                port=config.port,
                db=config.db,
                password=config.password,
                decode_responses=True,
            )
        client.ping()
        logger.info(
            "Redis client initialized",
            url=config.url,
            host=config.host,
            port=config.port,
            db=config.db,
        )
    except Exception as e:
        logger.error("Failed to initialize Redis", error=str(e))
        raise

    return client
