"""updatestream schema definitions.

All Pydantic v2 models used by the decoder, the pacing stages and the client.
"""

from updatestream.schemas.config import StreamingConfig
from updatestream.schemas.updates import (
    FileUpdate,
    FinalAnswerUpdate,
    MessageUpdate,
    OpaqueUpdate,
    ReasoningUpdate,
    StatusUpdate,
    StreamUpdate,
    TitleUpdate,
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

__all__ = [
    "FileUpdate",
    "FinalAnswerUpdate",
    "MessageUpdate",
    "OpaqueUpdate",
    "ReasoningUpdate",
    "StatusUpdate",
    "StreamUpdate",
    "StreamingConfig",
    "TitleUpdate",
    "ToolUpdate",
    "ToolUpdateType",
    "UpdateType",
    "dump_update",
    "is_stream_update",
    "is_tool_call_update",
    "is_tool_error_update",
    "is_tool_progress_update",
    "is_tool_result_update",
    "is_tool_update",
    "parse_update",
]
