"""
Tests for stream and consumer group creation.
"""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from src.streams.bootstrap import ensure_stream_and_group
from src.streams.errors import InitializationError


class TestEnsureStreamAndGroup:
    """Tests for ensure_stream_and_group."""

    def test_creates_group_with_mkstream(self, mock_redis):
        created = ensure_stream_and_group(mock_redis, "events", "billing", "0", True)

        assert created is True
        mock_redis.xgroup_create.assert_called_once_with(
            "events", "billing", id="0", mkstream=True
        )

    def test_creates_group_without_mkstream(self, mock_redis):
        ensure_stream_and_group(mock_redis, "events", "billing", "$", False)

        mock_redis.xgroup_create.assert_called_once_with(
            "events", "billing", id="$", mkstream=False
        )

    def test_existing_group_is_success(self, mock_redis):
        """BUSYGROUP means another member got there first."""
        mock_redis.xgroup_create.side_effect = ResponseError(
            "BUSYGROUP Consumer Group name already exists"
        )

        assert ensure_stream_and_group(mock_redis, "events", "billing", "0", True) is False

    def test_missing_stream_fails(self, mock_redis):
        mock_redis.xgroup_create.side_effect = ResponseError(
            "The XGROUP subcommand requires the key to exist."
        )

        with pytest.raises(InitializationError) as exc_info:
            ensure_stream_and_group(mock_redis, "events", "billing", "0", False)

        assert exc_info.value.command == "XGROUP CREATE events billing 0"
        assert isinstance(exc_info.value.__cause__, ResponseError)

    def test_connection_failure_fails(self, mock_redis):
        mock_redis.xgroup_create.side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(InitializationError, match="MKSTREAM"):
            ensure_stream_and_group(mock_redis, "events", "billing", "0", True)


class TestEnsureStreamAndGroupOnRedis:
    """Tests against fakeredis."""

    def test_creates_empty_stream(self, fake_redis):
        assert not fake_redis.exists("events")

        ensure_stream_and_group(fake_redis, "events", "billing", "0", True)

        assert fake_redis.exists("events")
        assert fake_redis.xlen("events") == 0

    def test_does_not_create_stream_when_not_asked(self, fake_redis):
        with pytest.raises(InitializationError):
            ensure_stream_and_group(fake_redis, "events", "billing", "0", False)

        assert not fake_redis.exists("events")

    def test_idempotent(self, fake_redis):
        """Repeated creation never fails nor moves the group."""
        fake_redis.xadd("events", {"key": "value_1"})

        assert ensure_stream_and_group(fake_redis, "events", "billing", "0", True) is True
        before = fake_redis.xinfo_groups("events")

        fake_redis.xadd("events", {"key": "value_2"})
        assert ensure_stream_and_group(fake_redis, "events", "billing", "$", True) is False
        after = fake_redis.xinfo_groups("events")

        assert len(after) == 1
        assert after[0]["last-delivered-id"] == before[0]["last-delivered-id"]


class TestEnsureStreamAndGroupErrors:
    """Only a BUSYGROUP reply from Redis counts as an existing group."""

    def test_busygroup_text_outside_a_reply_fails(self, mock_redis):
        mock_redis.xgroup_create.side_effect = RedisConnectionError("BUSYGROUP lookalike")

        with pytest.raises(InitializationError) as exc_info:
            ensure_stream_and_group(mock_redis, "events", "billing", "0", True)

        assert isinstance(exc_info.value.__cause__, RedisConnectionError)
