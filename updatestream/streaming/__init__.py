"""Message update streaming pipeline.

Stages, in data-flow order: NDJSON framing, word coalescing, typewriter
pacing. UpdateStream wires them to a network reader and an abort signal.
"""

from updatestream.streaming.abort import AbortController
from updatestream.streaming.framing import FrameBatch, FramingStats, decode_updates, split_frames
from updatestream.streaming.pipeline import (
    UpdateStream,
    UpdateStreamError,
    check_response,
    open_update_stream,
)
from updatestream.streaming.reader import ChunkReader, ReplayReader, ResponseReader, read_chunks
from updatestream.streaming.smooth import PacingQueue, SmoothPacer, smooth_updates
from updatestream.streaming.words import begins_word, coalesce_words, ends_word

__all__ = [
    "AbortController",
    "ChunkReader",
    "FrameBatch",
    "FramingStats",
    "PacingQueue",
    "ReplayReader",
    "ResponseReader",
    "SmoothPacer",
    "UpdateStream",
    "UpdateStreamError",
    "begins_word",
    "check_response",
    "coalesce_words",
    "decode_updates",
    "ends_word",
    "open_update_stream",
    "read_chunks",
    "smooth_updates",
    "split_frames",
]
