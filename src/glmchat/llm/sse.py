"""Server-Sent Events framing.

Only the subset the endpoint uses is supported: one ``event:`` and one
``data:`` line per frame, terminated by a blank line.  Repeated fields
overwrite each other; there is no multi-line ``data:`` continuation.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SSEFrame:
    """One complete ``(event, data)`` pair."""

    event: str
    data: str


class ParserState(enum.Enum):
    IDLE = "idle"
    COLLECTING = "collecting"


class SSEFrameParser:
    """Line-driven state machine: IDLE -> COLLECTING -> flush -> IDLE."""

    def __init__(self) -> None:
        self.state = ParserState.IDLE
        self._event = ""
        self._data = ""

    def feed(self, line: str) -> SSEFrame | None:
        """Consume one line (without its terminator).

        Returns a frame when a blank line completes one with both fields
        set.  Incomplete frames are dropped silently (keep-alives).
        """
        line = line.rstrip("\r\n")

        if not line:
            return self._flush()

        if line.startswith("event:"):
            self._event = line[len("event:"):].strip()
            self.state = ParserState.COLLECTING
        elif line.startswith("data:"):
            self._data = line[len("data:"):].strip()
            self.state = ParserState.COLLECTING
        # ":" comments, "id:" and "retry:" are ignored
        return None

    def finish(self) -> None:
        """End of stream.  A frame without its blank line is discarded."""
        if self.state is ParserState.COLLECTING:
            _logger.debug("Dropping unterminated SSE frame: event=%r", self._event)
        self._reset()

    def _flush(self) -> SSEFrame | None:
        frame = None
        if self._event and self._data:
            frame = SSEFrame(event=self._event, data=self._data)
        elif self.state is ParserState.COLLECTING:
            _logger.debug("Discarding partial SSE frame: event=%r", self._event)
        self._reset()
        return frame

    def _reset(self) -> None:
        self.state = ParserState.IDLE
        self._event = ""
        self._data = ""


async def iter_frames(lines: AsyncIterable[str]) -> AsyncIterator[SSEFrame]:
    """Turn an async line iterator into SSE frames.

    Read errors from *lines* propagate to the caller unchanged.
    """
    parser = SSEFrameParser()
    async for line in lines:
        frame = parser.feed(line)
        if frame is not None:
            yield frame
    parser.finish()
