"""Conversation log and the per-call fold of streamed deltas.

The log is append-only and shared by every call made through one client,
so all access goes through a lock.  Turns are immutable, which makes a
tuple copy of the log an independent snapshot.
"""

from __future__ import annotations

import enum
import logging
import threading

from glmchat.types import ConversationTurn, StreamEvent, ToolCall

_logger = logging.getLogger(__name__)


class ConversationHistory:
    """Thread-safe, append-only conversation log."""

    def __init__(self) -> None:
        self._turns: list[ConversationTurn] = []
        self._lock = threading.Lock()

    def append(self, turn: ConversationTurn) -> None:
        with self._lock:
            self._turns.append(turn)

    def append_user(self, content: str) -> tuple[ConversationTurn, ...]:
        """Append a user turn and return the log snapshot including it.

        Empty content appends nothing (continuation after a tool response).
        """
        with self._lock:
            if content:
                self._turns.append(ConversationTurn.user(content))
            return tuple(self._turns)

    def add_tool_response(self, content: str) -> None:
        self.append(ConversationTurn.tool(content))

    def clear(self) -> None:
        with self._lock:
            self._turns = []

    def snapshot(self) -> tuple[ConversationTurn, ...]:
        with self._lock:
            return tuple(self._turns)

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)


class FoldState(enum.Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    FOLDING = "folding"


class TurnAccumulator:
    """Collects one call's text and tool-call fragments into a single turn.

    States: IDLE -> AWAITING_RESPONSE -> FOLDING -> IDLE
    """

    def __init__(self) -> None:
        self.state = FoldState.IDLE
        self._text: list[str] = []
        self._tool_calls: list[ToolCall] = []

    def begin(self) -> None:
        self._text = []
        self._tool_calls = []
        self.state = FoldState.AWAITING_RESPONSE

    def observe(self, event: StreamEvent) -> None:
        if self.state is not FoldState.AWAITING_RESPONSE:
            raise RuntimeError(f"cannot observe events in state {self.state.value}")
        if event.text:
            self._text.append(event.text)
        if event.tool_call is not None:
            self._tool_calls.append(event.tool_call)

    @property
    def has_content(self) -> bool:
        return bool(self._text) or bool(self._tool_calls)

    def fold(self) -> ConversationTurn | None:
        """Return the assistant turn, or ``None`` if nothing was streamed."""
        self.state = FoldState.FOLDING
        turn = None
        if self.has_content:
            turn = ConversationTurn.assistant(
                "".join(self._text) or None, self._tool_calls,
            )
        self._reset()
        return turn

    def discard(self) -> None:
        """Drop partial content after a terminal error."""
        if self.has_content:
            _logger.debug(
                "Discarding partial assistant turn (%d text deltas, %d tool calls)",
                len(self._text), len(self._tool_calls),
            )
        self._reset()

    def _reset(self) -> None:
        self._text = []
        self._tool_calls = []
        self.state = FoldState.IDLE
