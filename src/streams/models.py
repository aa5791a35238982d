"""
Data models and configuration for Redis stream consumers.
"""

import os
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from dotenv import load_dotenv

load_dotenv()

# Cursor tokens understood by XREAD / XREADGROUP / XGROUP CREATE
BEGINNING = "0"
TAIL = "$"
PENDING = "0"
NEW_ENTRIES = ">"


@dataclass(frozen=True)
class StartOfStream:
    """Start from the first entry of the stream"""


@dataclass(frozen=True)
class EndOfStream:
    """Start after the last entry of the stream (new entries only)"""


@dataclass(frozen=True)
class ExplicitId:
    """Start right after a given entry id"""

    id: str


StartPosition = Union[StartOfStream, EndOfStream, ExplicitId]


def parse_start_position(value: str) -> StartPosition:
    """Parse a start position from its command-line form.

    ``beginning``/``start`` and ``tail``/``end`` are keywords, anything else is
    taken as a literal entry id.
    """
    keyword = value.strip().lower()
    if keyword in ("beginning", "start"):
        return StartOfStream()
    if keyword in ("tail", "end"):
        return EndOfStream()
    return ExplicitId(value.strip())


@dataclass(frozen=True)
class GroupIdentity:
    """Consumer group name and the member name used by this consumer"""

    group_name: str
    member_name: str

    def __post_init__(self):
        if not self.group_name:
            raise ValueError("group_name must not be empty")
        if not self.member_name:
            raise ValueError("member_name must not be empty")


@dataclass(frozen=True)
class ConsumerConfig:
    """Configuration for a stream consumer"""

    count: Optional[int] = None  # Max entries per read, None means unlimited
    group: Optional[GroupIdentity] = None
    create_stream_if_missing: bool = True
    process_pending: bool = True
    start_position: StartPosition = field(default_factory=EndOfStream)
    timeout_ms: int = 2000  # 0 blocks forever

    def __post_init__(self):
        if self.count is not None and self.count < 1:
            raise ValueError(f"count must be a positive integer, got {self.count}")
        if self.timeout_ms < 0:
            raise ValueError(f"timeout_ms must not be negative, got {self.timeout_ms}")

    @property
    def is_group(self) -> bool:
        return self.group is not None


@dataclass(frozen=True)
class Message:
    """A stream entry as read from Redis"""

    id: str
    fields: Optional[dict[str, str]]  # None when a pending entry was trimmed from the stream


Handler = Callable[[str, dict[str, str]], None]


@dataclass
class ConnectionConfig:
    """Redis connection settings, defaulting to the environment"""

    url: Optional[str] = field(default_factory=lambda: os.getenv("REDIS_URL"))
    host: str = field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(os.getenv("REDIS_PORT", "6379")))
    db: int = field(default_factory=lambda: int(os.getenv("REDIS_DB", "0")))
    password: Optional[str] = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))
