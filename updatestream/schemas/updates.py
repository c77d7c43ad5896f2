"""Message update schemas for the streamed conversation endpoint.

Every line of the endpoint's newline-delimited JSON body decodes to one
MessageUpdate. The pipeline only distinguishes StreamUpdate (a fragment of
generated text) from everything else; all other variants are carried
through unmodified.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal, TypeGuard, Union

from pydantic import BaseModel, ConfigDict, Field


class UpdateType(StrEnum):
    """Discriminant values of the message update union."""

    STREAM = "stream"
    TOOL = "tool"
    STATUS = "status"
    TITLE = "title"
    FINAL_ANSWER = "finalAnswer"
    FILE = "file"
    REASONING = "reasoning"


class ToolUpdateType(StrEnum):
    """Subtypes of a tool update."""

    CALL = "call"
    RESULT = "result"
    ERROR = "error"
    PROGRESS = "progress"


class StreamUpdate(BaseModel):
    """A fragment of generated text."""

    model_config = ConfigDict(frozen=True)

    type: Literal["stream"] = Field(default="stream", description="Update discriminant")
    token: str = Field(description="Text fragment")


class _PassthroughUpdate(BaseModel):
    """Base for structural updates: frozen, keeps unknown fields verbatim."""

    model_config = ConfigDict(frozen=True, extra="allow")


class ToolUpdate(_PassthroughUpdate):
    """Tool call lifecycle event (call, result, error, progress)."""

    type: Literal["tool"] = "tool"
    subtype: ToolUpdateType = Field(description="Tool event subtype")
    uuid: str = Field(description="Identifier shared by all events of one tool call")


class StatusUpdate(_PassthroughUpdate):
    type: Literal["status"] = "status"
    status: str
    message: str | None = None


class TitleUpdate(_PassthroughUpdate):
    type: Literal["title"] = "title"
    title: str


class FinalAnswerUpdate(_PassthroughUpdate):
    type: Literal["finalAnswer"] = "finalAnswer"
    text: str = ""
    interrupted: bool = False


class FileUpdate(_PassthroughUpdate):
    type: Literal["file"] = "file"
    name: str
    sha: str
    mime: str | None = None


class ReasoningUpdate(_PassthroughUpdate):
    type: Literal["reasoning"] = "reasoning"
    subtype: str
    token: str | None = None
    status: str | None = None


class OpaqueUpdate(_PassthroughUpdate):
    """Any update whose type this package does not model.

    The raw payload is kept as extra fields so it can be re-emitted as-is.
    """

    type: str


MessageUpdate = Union[
    StreamUpdate,
    ToolUpdate,
    StatusUpdate,
    TitleUpdate,
    FinalAnswerUpdate,
    FileUpdate,
    ReasoningUpdate,
    OpaqueUpdate,
]

_MODELS_BY_TYPE: dict[str, type[BaseModel]] = {
    UpdateType.STREAM: StreamUpdate,
    UpdateType.TOOL: ToolUpdate,
    UpdateType.STATUS: StatusUpdate,
    UpdateType.TITLE: TitleUpdate,
    UpdateType.FINAL_ANSWER: FinalAnswerUpdate,
    UpdateType.FILE: FileUpdate,
    UpdateType.REASONING: ReasoningUpdate,
}


def parse_update(obj: Any) -> MessageUpdate:
    """Validate one decoded JSON value as a MessageUpdate.

    Args:
        obj: The value returned by json.loads for a single line.

    Returns:
        The matching update model. Objects with an unrecognised ``type``
        become an OpaqueUpdate.

    Raises:
        TypeError: If the value is not a JSON object with a string ``type``.
        pydantic.ValidationError: If a known update type has an invalid shape.
    """
    if not isinstance(obj, dict) or not isinstance(obj.get("type"), str):
        raise TypeError(f"Expected an update object with a 'type', got {type(obj).__name__}")

    model = _MODELS_BY_TYPE.get(obj["type"], OpaqueUpdate)
    return model.model_validate(obj)  # type: ignore[return-value]


def dump_update(update: MessageUpdate) -> dict[str, Any]:
    """Serialize an update back to its wire form.

    Only fields present on the wire (or set explicitly) are written, so a
    decoded payload re-encodes unchanged: no defaults are added and explicit
    nulls are kept. ``type`` is always written.
    """
    data = update.model_dump(mode="json", by_alias=True, exclude_unset=True)
    return {"type": update.type, **data}


# ── Type guards ───────────────────────────────────────────────────


def is_stream_update(update: MessageUpdate) -> TypeGuard[StreamUpdate]:
    return isinstance(update, StreamUpdate)


def is_tool_update(update: MessageUpdate) -> TypeGuard[ToolUpdate]:
    return isinstance(update, ToolUpdate)


def is_tool_call_update(update: MessageUpdate) -> TypeGuard[ToolUpdate]:
    return is_tool_update(update) and update.subtype == ToolUpdateType.CALL


def is_tool_result_update(update: MessageUpdate) -> TypeGuard[ToolUpdate]:
    return is_tool_update(update) and update.subtype == ToolUpdateType.RESULT


def is_tool_error_update(update: MessageUpdate) -> TypeGuard[ToolUpdate]:
    return is_tool_update(update) and update.subtype == ToolUpdateType.ERROR


def is_tool_progress_update(update: MessageUpdate) -> TypeGuard[ToolUpdate]:
    return is_tool_update(update) and update.subtype == ToolUpdateType.PROGRESS
