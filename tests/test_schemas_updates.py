"""Tests for updatestream.schemas.updates — the message update union."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from updatestream.schemas.updates import (
    FinalAnswerUpdate,
    OpaqueUpdate,
    StatusUpdate,
    StreamUpdate,
    ToolUpdate,
    ToolUpdateType,
    UpdateType,
    dump_update,
    is_stream_update,
    is_tool_call_update,
    is_tool_error_update,
    is_tool_progress_update,
    is_tool_result_update,
    is_tool_update,
    parse_update,
)


def _tool(subtype: str) -> ToolUpdate:
    return parse_update({"type": "tool", "subtype": subtype, "uuid": "t-1"})


class TestParseUpdate:
    def test_stream(self):
        update = parse_update({"type": "stream", "token": "Hel"})
        assert isinstance(update, StreamUpdate)
        assert update.token == "Hel"

    def test_tool_keeps_payload(self):
        raw = {
            "type": "tool",
            "subtype": "call",
            "uuid": "abc",
            "call": {"name": "search", "parameters": {"q": "weather"}},
        }
        update = parse_update(raw)
        assert isinstance(update, ToolUpdate)
        assert update.subtype == ToolUpdateType.CALL
        assert dump_update(update) == raw

    def test_status(self):
        update = parse_update({"type": "status", "status": "started"})
        assert isinstance(update, StatusUpdate)
        assert update.message is None

    def test_final_answer(self):
        update = parse_update({"type": "finalAnswer", "text": "Hi", "interrupted": True})
        assert isinstance(update, FinalAnswerUpdate)
        assert update.interrupted is True

    def test_unknown_type_is_opaque(self):
        raw = {"type": "routerMetadata", "route": "code", "model": "m"}
        update = parse_update(raw)
        assert isinstance(update, OpaqueUpdate)
        assert dump_update(update) == raw

    def test_minimal_payload_round_trips_without_defaults(self):
        raw = {"type": "finalAnswer"}
        assert dump_update(parse_update(raw)) == raw

    def test_explicit_null_round_trips(self):
        raw = {"type": "status", "status": "x", "message": None}
        assert dump_update(parse_update(raw)) == raw

    def test_dump_of_constructed_stream_update_has_type(self):
        assert dump_update(StreamUpdate(token="a")) == {"type": "stream", "token": "a"}

    def test_non_object_rejected(self):
        with pytest.raises(TypeError):
            parse_update([1, 2, 3])

    def test_missing_type_rejected(self):
        with pytest.raises(TypeError):
            parse_update({"token": "x"})

    def test_invalid_known_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_update({"type": "stream"})

    def test_invalid_tool_subtype_rejected(self):
        with pytest.raises(ValidationError):
            parse_update({"type": "tool", "subtype": "explode", "uuid": "x"})


class TestImmutability:
    def test_stream_update_is_frozen(self):
        update = StreamUpdate(token="a")
        with pytest.raises(ValidationError):
            update.token = "b"

    def test_tool_update_is_frozen(self):
        update = _tool("call")
        with pytest.raises(ValidationError):
            update.uuid = "other"


class TestTypeGuards:
    def test_stream_guard(self):
        assert is_stream_update(StreamUpdate(token="x"))
        assert not is_stream_update(_tool("call"))

    def test_tool_guards(self):
        assert is_tool_update(_tool("call"))
        assert is_tool_call_update(_tool("call"))
        assert is_tool_result_update(_tool("result"))
        assert is_tool_error_update(_tool("error"))
        assert is_tool_progress_update(_tool("progress"))

    def test_tool_guards_reject_other_subtypes(self):
        assert not is_tool_call_update(_tool("result"))
        assert not is_tool_result_update(StreamUpdate(token="x"))

    def test_update_type_values(self):
        assert UpdateType.STREAM == "stream"
        assert UpdateType.FINAL_ANSWER == "finalAnswer"
