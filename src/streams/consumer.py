"""
Stream consumer reading a Redis stream, standalone or as a consumer group member.
"""

import time
from typing import Any, Optional

import structlog
from redis import Redis
from redis.exceptions import RedisError

from .bootstrap import ensure_stream_and_group
from .errors import ReadError
from .models import NEW_ENTRIES, ConsumerConfig, Handler, Message
from .positions import resolve_positions

logger = structlog.get_logger(__name__)


def _decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class StreamConsumer:
    """Consumes a single Redis stream and dispatches entries to a handler.

    Each call to ``consume`` performs one blocking read and hands every
    delivered entry to ``handler(id, fields)`` in stream order. As a group
    member, handled entries are acknowledged with ``XACK``; an entry whose
    handler raised stays pending and is redelivered to a member started with
    ``process_pending=True``.

    The consumer owns its connection and must not be driven from several
    threads at once.
    """

    def __init__(
        self,
        redis: Redis,
        stream: str,
        handler: Handler,
        config: Optional[ConsumerConfig] = None,
    ):
        self.redis = redis
        self.stream = stream
        self.handler = handler
        self.config = config or ConsumerConfig()

        group_anchor, cursor = resolve_positions(
            self.config.is_group, self.config.process_pending, self.config.start_position
        )

        if self.config.is_group:
            ensure_stream_and_group(
                redis,
                stream,
                self.config.group.group_name,
                group_anchor,
                self.config.create_stream_if_missing,
            )

        self.cursor = cursor
        self.handled_messages = 0
        self.draining_pending = self.config.is_group and self.config.process_pending

        self.stats = {
            "reads": 0,
            "acknowledged": 0,
            "ack_failures": 0,
            "handler_errors": 0,
            "deleted_pending": 0,
        }

        logger.info(
            "Stream consumer initialized",
            stream=stream,
            group=self.config.group.group_name if self.config.is_group else None,
            member=self.config.group.member_name if self.config.is_group else None,
            cursor=cursor,
            draining_pending=self.draining_pending,
        )

    def consume(self) -> int:
        """Read once from the stream and dispatch the delivered entries.

        When the pending backlog of a group member turns out empty, the
        consumer switches to new entries and reads again within the same call.

        Returns:
            Number of entries handled during this call.

        Raises:
            ReadError: The read itself failed.
            Exception: Whatever the handler raised, unchanged.
        """
        entries = self._read()

        if not entries and self.draining_pending:
            # The switch happens once per consumer, so a single retry is enough.
            logger.info("Pending entries processed, switching to new entries", stream=self.stream)
            self.draining_pending = False
            self.cursor = NEW_ENTRIES
            entries = self._read()

        handled = 0
        for message in entries:
            # Once on `>` the group tracks our position for us
            if self.cursor != NEW_ENTRIES:
                self.cursor = message.id

            # Trimmed while pending: no payload can ever be handled, so the ack
            # only clears the dead id from this member's pending list
            if message.fields is None:
                self._skip_deleted(message.id)
                continue

            self._process_message(message.id, message.fields)
            handled += 1

        return handled

    def run(self, duration_seconds: Optional[int] = None):
        """Consume continuously or for a given duration

        Args:
            duration_seconds: Optional duration in seconds. If None, runs indefinitely.
        """
        logger.info(
            "Starting stream consumer",
            stream=self.stream,
            duration=duration_seconds if duration_seconds else "indefinite",
        )

        start_time = time.time()
        last_log_time = start_time

        try:
            while True:
                self.consume()

                elapsed = time.time() - start_time
                if time.time() - last_log_time >= 10:
                    rate = self.handled_messages / elapsed if elapsed > 0 else 0
                    logger.info(
                        "Consumer stats",
                        handled=self.handled_messages,
                        rate_per_sec=round(rate, 1),
                        elapsed_sec=round(elapsed, 1),
                        **self.stats,
                    )
                    last_log_time = time.time()

                if duration_seconds and elapsed >= duration_seconds:
                    logger.info("Duration limit reached", duration_seconds=duration_seconds)
                    break

        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping consumer")

        except Exception as e:
            logger.error("Consumer error", error=str(e), exc_info=True)
            raise

        finally:
            logger.info(
                "Consumer stopped",
                stream=self.stream,
                handled=self.handled_messages,
                cursor=self.cursor,
                elapsed_sec=round(time.time() - start_time, 1),
                **self.stats,
            )

    def _read(self) -> list[Message]:
        """Issue one blocking XREAD / XREADGROUP at the current cursor"""
        self.stats["reads"] += 1
        streams = {self.stream: self.cursor}

        try:
            if self.config.is_group:
                reply = self.redis.xreadgroup(
                    self.config.group.group_name,
                    self.config.group.member_name,
                    streams,
                    count=self.config.count,
                    block=self.config.timeout_ms,
                )
            else:
                reply = self.redis.xread(
                    streams, count=self.config.count, block=self.config.timeout_ms
                )
        except RedisError as e:
            logger.error(
                "Failed to read stream", stream=self.stream, cursor=self.cursor, error=str(e)
            )
            raise ReadError(self.stream, self.cursor) from e

        entries = []
        for _stream_name, stream_entries in reply or []:
            for entry_id, fields in stream_entries or []:
                if entry_id is None:
                    continue
                # Entries always carry fields, an empty payload means the entry was deleted
                if fields:
                    fields = {_decode(k): _decode(v) for k, v in fields.items()}
                else:
                    fields = None
                entries.append(Message(_decode(entry_id), fields))

        logger.debug("Stream read", stream=self.stream, cursor=self.cursor, entries=len(entries))
        return entries

    def _process_message(self, entry_id: str, fields: dict[str, str]):
        """Call the handler and acknowledge the entry when in a group"""
        try:
            self.handler(entry_id, fields)
        except Exception:
            self.stats["handler_errors"] += 1
            logger.warning("Handler failed", stream=self.stream, id=entry_id)
            raise

        self.handled_messages += 1

        if self.config.is_group:
            self._acknowledge(entry_id)

    def _acknowledge(self, entry_id: str):
        try:
            self.redis.xack(self.stream, self.config.group.group_name, entry_id)
            self.stats["acknowledged"] += 1
        except RedisError as e:
            self.stats["ack_failures"] += 1
            logger.warning(
                "Failed to acknowledge entry",
                stream=self.stream,
                group=self.config.group.group_name,
                id=entry_id,
                error=str(e),
            )

    def _skip_deleted(self, entry_id: str):
        """A pending entry was trimmed from the stream, nothing left to handle"""
        self.stats["deleted_pending"] += 1
        logger.warning("Pending entry no longer in stream", stream=self.stream, id=entry_id)
        if self.config.is_group:
            self._acknowledge(entry_id)
