"""Decode SSE frames into :class:`StreamEvent` objects.

Missing ``think``/``text`` fields are normal and never an error.  Invalid
JSON, or a ``tool_calls`` object whose ``function`` lacks a string
``name``/``arguments`` or whose ``index`` is not finite, produces an
event carrying a :class:`DecodeError`.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from glmchat.errors import DecodeError
from glmchat.llm.sse import SSEFrame
from glmchat.types import StreamEvent, ToolCall, ToolCallFunction

_logger = logging.getLogger(__name__)


def _parse_index(index: Any) -> int:
    # JSON numbers may arrive as floats; booleans are not indices
    if isinstance(index, bool) or not isinstance(index, (int, float)):
        return 0
    if isinstance(index, float) and not math.isfinite(index):
        raise DecodeError(f"tool call index is not a finite number: {index!r}")
    return int(index)


def _parse_tool_call(tc: dict[str, Any]) -> ToolCall:
    call_id = tc.get("id")
    call_type = tc.get("type")
    index = tc.get("index")

    function = None
    fn = tc.get("function")
    if isinstance(fn, dict):
        name = fn.get("name")
        arguments = fn.get("arguments")
        if not isinstance(name, str):
            raise DecodeError("tool call function is missing a string 'name'")
        if not isinstance(arguments, str):
            raise DecodeError(
                f"tool call {name!r} is missing a string 'arguments'"
            )
        function = ToolCallFunction(name=name, arguments=arguments)

    return ToolCall(
        id=call_id if isinstance(call_id, str) else None,
        type=call_type if isinstance(call_type, str) else "",
        index=_parse_index(index),
        function=function,
    )


def decode_event(event: str, data: str) -> StreamEvent:
    """Map one ``(event, data)`` pair to a :class:`StreamEvent`."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        _logger.warning("Undecodable %s payload: %s", event, e)
        return StreamEvent(
            event=event,
            error=DecodeError(f"unmarshal event data: {e}", data=data),
        )
    if not isinstance(payload, dict):
        return StreamEvent(
            event=event,
            error=DecodeError("event data is not a JSON object", data=data),
        )

    result = StreamEvent(event=event, raw=payload)

    think = payload.get("think")
    if isinstance(think, str):
        result.think = think

    text = payload.get("text")
    if isinstance(text, str):
        result.text = text

    tc = payload.get("tool_calls")
    if isinstance(tc, dict):
        try:
            result.tool_call = _parse_tool_call(tc)
        except DecodeError as e:
            e.data = data
            _logger.warning("Malformed tool call in %s event: %s", event, e)
            result.error = e

    return result


def decode_frame(frame: SSEFrame) -> StreamEvent:
    return decode_event(frame.event, frame.data)
