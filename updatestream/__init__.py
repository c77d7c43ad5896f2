"""updatestream — smooth rendering pipeline for streamed message updates."""

__version__ = "0.1.0"

from updatestream.client import ConversationClient, MessageFile, MessageUpdateRequest
from updatestream.schemas.config import StreamingConfig
from updatestream.schemas.updates import MessageUpdate, StreamUpdate
from updatestream.streaming import (
    AbortController,
    UpdateStream,
    UpdateStreamError,
    coalesce_words,
    decode_updates,
    open_update_stream,
    smooth_updates,
)

__all__ = [
    "AbortController",
    "ConversationClient",
    "MessageFile",
    "MessageUpdate",
    "MessageUpdateRequest",
    "StreamUpdate",
    "StreamingConfig",
    "UpdateStream",
    "UpdateStreamError",
    "coalesce_words",
    "decode_updates",
    "open_update_stream",
    "smooth_updates",
]
