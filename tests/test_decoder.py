"""Tests for decoding SSE payloads into stream events."""

import json

from glmchat.errors import DecodeError
from glmchat.llm.decoder import decode_event
from glmchat.types import ToolCall, ToolCallFunction


class TestTextAndThinking:
    def test_text_delta(self):
        ev = decode_event("message", '{"text":"Hi"}')
        assert ev.event == "message"
        assert ev.text == "Hi"
        assert ev.think == ""
        assert ev.tool_call is None
        assert ev.error is None
        assert ev.raw == {"text": "Hi"}

    def test_think_delta(self):
        ev = decode_event("think", '{"think":"Let me see"}')
        assert ev.think == "Let me see"
        assert ev.text == ""

    def test_both_fields(self):
        ev = decode_event("message", '{"think":"a","text":"b"}')
        assert ev.think == "a"
        assert ev.text == "b"

    def test_missing_fields_are_not_errors(self):
        ev = decode_event("status", '{"status":"finished"}')
        assert ev.error is None
        assert ev.text == ""
        assert ev.raw == {"status": "finished"}

    def test_non_string_text_ignored(self):
        ev = decode_event("message", '{"text":42,"think":null}')
        assert ev.error is None
        assert ev.text == ""
        assert ev.think == ""

    def test_unknown_fields_kept_in_raw(self):
        payload = {"text": "x", "usage": {"tokens": 3}, "nested": [1, 2]}
        ev = decode_event("message", json.dumps(payload))
        assert ev.raw == payload


class TestInvalidPayload:
    def test_invalid_json(self):
        ev = decode_event("message", "{not json")
        assert isinstance(ev.error, DecodeError)
        assert ev.error.data == "{not json"
        assert ev.is_error
        assert ev.event == "message"
        assert ev.raw == {}

    def test_non_object_json(self):
        ev = decode_event("message", "[1, 2]")
        assert isinstance(ev.error, DecodeError)


class TestToolCalls:
    def test_full_tool_call(self):
        data = (
            '{"tool_calls":{"id":"1","type":"function","index":0,'
            '"function":{"name":"get_weather","arguments":"{\\"location\\":\\"Moscow\\"}"}}}'
        )
        ev = decode_event("functionHit", data)
        assert ev.error is None
        assert ev.tool_call == ToolCall(
            id="1",
            type="function",
            index=0,
            function=ToolCallFunction(
                name="get_weather", arguments='{"location":"Moscow"}',
            ),
        )

    def test_arguments_left_unparsed(self):
        data = json.dumps({"tool_calls": {
            "function": {"name": "f", "arguments": "not json at all"},
        }})
        ev = decode_event("functionHit", data)
        assert ev.tool_call.function.arguments == "not json at all"

    def test_absent_fields_zero_valued(self):
        ev = decode_event("functionHit", '{"tool_calls":{}}')
        assert ev.error is None
        assert ev.tool_call == ToolCall()
        assert ev.tool_call.id is None
        assert ev.tool_call.type == ""
        assert ev.tool_call.index == 0
        assert ev.tool_call.function is None

    def test_float_index(self):
        ev = decode_event("functionHit", '{"tool_calls":{"index":2.0}}')
        assert ev.tool_call.index == 2

    def test_overflowing_index_is_error(self):
        data = '{"tool_calls":{"index":1e400,"function":{"name":"f","arguments":"{}"}}}'
        ev = decode_event("functionHit", data)
        assert isinstance(ev.error, DecodeError)
        assert ev.error.data == data
        assert ev.event == "functionHit"
        assert ev.tool_call is None

    def test_nan_index_is_error(self):
        ev = decode_event("functionHit", '{"tool_calls":{"index":NaN}}')
        assert isinstance(ev.error, DecodeError)
        assert "finite" in str(ev.error)

    def test_wrongly_typed_fields_zero_valued(self):
        ev = decode_event("functionHit", '{"tool_calls":{"id":5,"type":null,"index":"1"}}')
        assert ev.error is None
        assert ev.tool_call.id is None
        assert ev.tool_call.type == ""
        assert ev.tool_call.index == 0

    def test_missing_function_name_is_error(self):
        data = json.dumps({"tool_calls": {"id": "1", "function": {"arguments": "{}"}}})
        ev = decode_event("functionHit", data)
        assert isinstance(ev.error, DecodeError)
        assert "name" in str(ev.error)
        assert ev.tool_call is None

    def test_missing_arguments_is_error(self):
        data = json.dumps({"tool_calls": {"function": {"name": "f"}}})
        ev = decode_event("functionHit", data)
        assert isinstance(ev.error, DecodeError)

    def test_tool_calls_list_ignored(self):
        ev = decode_event("message", '{"tool_calls":[{"id":"1"}]}')
        assert ev.tool_call is None
        assert ev.error is None
