"""Newline-delimited JSON framing for the message update stream.

Network chunks arrive at arbitrary boundaries, so a record can be split
across any number of chunks. Each chunk is appended to the pending carry and
split on newlines; only segments followed by a newline are parsed. The final
segment is always kept as carry until a later delimiter confirms it.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass, field

from pydantic import ValidationError

from updatestream.schemas.updates import MessageUpdate, parse_update

logger = logging.getLogger(__name__)


@dataclass
class FramingStats:
    """Counters for one decoded stream."""

    chunks: int = 0
    records: int = 0
    dropped: int = 0


@dataclass
class FrameBatch:
    """Result of splitting one carry+chunk text into records."""

    updates: list[MessageUpdate] = field(default_factory=list)
    carry: str = ""
    dropped: int = 0


def split_frames(text: str) -> FrameBatch:
    """Parse every newline-terminated line of text.

    Lines that fail to parse are dropped. Blank lines are skipped. The text
    after the last newline is returned as carry without being parsed, even
    when it happens to be valid JSON.

    Args:
        text: Previous carry concatenated with the newest chunk.

    Returns:
        FrameBatch with the decoded updates, the new carry and the number of
        dropped lines.
    """
    *lines, carry = text.split("\n")
    batch = FrameBatch(carry=carry)

    for line in lines:
        if not line.strip():
            continue
        try:
            batch.updates.append(parse_update(json.loads(line)))
        except (ValueError, RecursionError, TypeError, ValidationError) as e:
            batch.dropped += 1
            logger.debug("Dropped malformed update line (%s): %.80r", type(e).__name__, line)

    return batch


async def decode_updates(
    chunks: AsyncIterable[str | bytes],
    *,
    stats: FramingStats | None = None,
) -> AsyncIterator[MessageUpdate]:
    """Decode a chunked NDJSON body into message updates.

    Byte chunks go through an incremental UTF-8 decoder so characters split
    across chunks are reassembled before framing. Whatever remains in the
    carry when the chunks run out is discarded.

    Args:
        chunks: Raw body chunks in arrival order.
        stats: Optional counters updated as the stream is consumed.

    Yields:
        One MessageUpdate per complete, well-formed line.
    """
    stats = stats if stats is not None else FramingStats()
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    carry = ""

    async for chunk in chunks:
        text = decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        if not text:
            continue
        stats.chunks += 1

        batch = split_frames(carry + text)
        carry = batch.carry
        stats.dropped += batch.dropped
        stats.records += len(batch.updates)

        for update in batch.updates:
            yield update

    if carry:
        logger.debug("Discarding %d chars of unterminated carry at end of stream", len(carry))
