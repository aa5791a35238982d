"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import MagicMock

import fakeredis
import pytest

from src.streams.models import ConsumerConfig, GroupIdentity, StartOfStream


@pytest.fixture
def mock_redis():
    """Redis client mock answering empty reads by default."""
    redis = MagicMock()
    redis.xread.return_value = []
    redis.xreadgroup.return_value = []
    redis.xack.return_value = 1
    return redis


@pytest.fixture
def fake_redis():
    """A clean fakeredis instance for each test."""
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture
def group_identity():
    return GroupIdentity("test-group", "test-member")


@pytest.fixture
def group_config(group_identity):
    """Group consumer configuration with a short blocking timeout."""
    return ConsumerConfig(
        group=group_identity,
        start_position=StartOfStream(),
        timeout_ms=50,
    )



# Docker-backed Redis, only started when integration tests are collected


def _session_has_integration_tests(session) -> bool:
    """Check if the test session contains any integration tests."""
    return any(item.get_closest_marker("integration") for item in session.items)


@pytest.fixture(scope="session")
def redis_container(request):
    """
    Provide a real Redis server for integration tests.

    Uses Testcontainers to start Redis in Docker once per session. Unit-only
    sessions never touch Docker.

    Yields:
        RedisContainer: Started container, or None when no integration test runs
    """
    if not _session_has_integration_tests(request.session):
        yield None
        return

    from testcontainers.redis import RedisContainer

    container = RedisContainer("redis:7-alpine")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Redis container not available: {e}")

    yield container

    container.stop()


@pytest.fixture
def redis_client(redis_container):
    """A Redis client on the test container, flushed after each test."""
    if redis_container is None:
        pytest.skip("Redis container not available - this fixture requires @pytest.mark.integration")

    client = redis_container.get_client(decode_responses=True)
    yield client
    client.flushall()
    client.close()
