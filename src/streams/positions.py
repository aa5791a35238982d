"""
Start position resolution for stream and group consumers.
"""

from typing import Optional

from .models import (
    BEGINNING,
    NEW_ENTRIES,
    PENDING,
    TAIL,
    EndOfStream,
    ExplicitId,
    StartOfStream,
    StartPosition,
)


def _anchor(start: StartPosition) -> str:
    if isinstance(start, StartOfStream):
        return BEGINNING
    if isinstance(start, EndOfStream):
        return TAIL
    return start.id


def resolve_positions(
    group_present: bool, process_pending: bool, start: StartPosition
) -> tuple[Optional[str], str]:
    """Return ``(group_anchor, initial_cursor)`` for a consumer.

    - ``group_anchor``: id given to ``XGROUP CREATE`` if the group has to be
      created. ``None`` for standalone consumers.
        - ``0`` for the beginning of the stream
        - ``$`` for the end of the stream (new entries only)
        - ``<id>`` for a specific id
    - ``initial_cursor``: first id passed to ``XREAD`` / ``XREADGROUP``
        - group members: ``0`` to drain pending entries first, ``>`` for new
          entries, ``<id>`` for a specific id
        - standalone: ``0``, ``$`` or ``<id>``, same as the anchor
    """
    if not group_present:
        return None, _anchor(start)

    anchor = _anchor(start)
    if process_pending:
        return anchor, PENDING
    if isinstance(start, ExplicitId):
        return anchor, start.id
    return anchor, NEW_ENTRIES
