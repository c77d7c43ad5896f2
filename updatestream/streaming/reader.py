"""Body readers for streamed HTTP responses.

A reader hands out decoded text chunks one at a time and can be cancelled,
which releases the underlying connection. read_chunks() drives a reader
under an AbortController so a pending read never outlives a cancellation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Protocol

import httpx

from updatestream.streaming.abort import AbortController

logger = logging.getLogger(__name__)


class ChunkReader(Protocol):
    """Minimal reader interface used by the pipeline."""

    async def read(self) -> str | bytes | None:
        """Return the next chunk, or None once the source is closed."""
        ...

    async def cancel(self) -> None:
        """Stop reading and release the source."""
        ...


class ResponseReader:
    """ChunkReader over a streaming httpx.Response.

    A dropped connection is reported as a normal end of stream.
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self._chunks = response.aiter_text()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def read(self) -> str | None:
        if self._cancelled:
            return None
        try:
            return await anext(self._chunks)
        except StopAsyncIteration:
            return None
        except (httpx.ReadError, httpx.RemoteProtocolError, httpx.StreamClosed) as e:
            logger.warning("Update stream closed early: %s", e)
            return None

    async def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        await self._response.aclose()


class ReplayReader:
    """ChunkReader over pre-recorded chunks, optionally delayed per chunk.

    Used to replay captured NDJSON bodies with a chosen fragmentation.
    """

    def __init__(self, chunks: Sequence[str | bytes], *, delay: float = 0.0) -> None:
        self._chunks = list(chunks)
        self._delay = delay
        self._index = 0
        self.cancel_calls = 0

    @classmethod
    def from_bytes(cls, body: bytes, chunk_size: int, *, delay: float = 0.0) -> ReplayReader:
        """Split body into fixed-size byte chunks."""
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        chunks = [body[i:i + chunk_size] for i in range(0, len(body), chunk_size)]
        return cls(chunks, delay=delay)

    async def read(self) -> str | bytes | None:
        if self.cancel_calls or self._index >= len(self._chunks):
            return None
        if self._delay:
            await asyncio.sleep(self._delay)
        chunk = self._chunks[self._index]
        self._index += 1
        return chunk

    async def cancel(self) -> None:
        self.cancel_calls += 1


async def _read_or_abort(reader: ChunkReader, abort: AbortController) -> str | bytes | None:
    """Race one read against the abort signal. None means stop."""
    read = asyncio.ensure_future(reader.read())
    aborted = asyncio.ensure_future(abort.wait())
    try:
        await asyncio.wait({read, aborted}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        read.cancel()
        aborted.cancel()
        await asyncio.gather(read, aborted, return_exceptions=True)

    if abort.aborted or read.cancelled():
        return None
    return read.result()


async def read_chunks(reader: ChunkReader, abort: AbortController) -> AsyncIterator[str | bytes]:
    """Yield chunks from reader until it closes or abort fires.

    The source closing aborts the controller, so every stage linked to it
    unwinds instead of waiting for more data.
    """
    while not abort.aborted:
        chunk = await _read_or_abort(reader, abort)
        if chunk is None:
            abort.abort("source closed")
            break
        if chunk:
            yield chunk
