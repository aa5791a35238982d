"""
Exceptions raised by stream producers and consumers.

Handler failures are never wrapped: whatever the caller's handler raises
reaches the caller unchanged.
"""


class StreamError(Exception):
    """Base class for stream errors"""


class InitializationError(StreamError):
    """Creating the stream or consumer group failed; the consumer is unusable."""

    def __init__(self, message: str, command: str):
        super().__init__(f"{message}: {command}")
        self.command = command


class ReadError(StreamError):
    """A blocking read against the stream failed. The consumer stays usable."""

    def __init__(self, stream: str, cursor: str):
        super().__init__(f"Failed to read stream {stream!r} at cursor {cursor!r}")
        self.stream = stream
        self.cursor = cursor


class ProduceError(StreamError):
    """Appending an entry to the stream failed."""

    def __init__(self, message: str, command: str):
        super().__init__(f"{message}: {command}")
        self.command = command
