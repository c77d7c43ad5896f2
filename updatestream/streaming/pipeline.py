"""Assembles the decode → coalesce → pace pipeline for one response.

UpdateStream owns the cancellation wiring between the caller and the
network reader:

- the caller's AbortController aborts an internal controller;
- the internal controller firing (caller abort, source closed, pipeline
  error) releases the reader exactly once;
- a caller abort stops emission at the next step without draining queued
  text.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import httpx

from updatestream.schemas.config import StreamingConfig
from updatestream.schemas.updates import MessageUpdate
from updatestream.streaming.abort import AbortController
from updatestream.streaming.framing import FramingStats, decode_updates
from updatestream.streaming.reader import ChunkReader, ResponseReader, read_chunks
from updatestream.streaming.smooth import SmoothPacer
from updatestream.streaming.words import coalesce_words

logger = logging.getLogger(__name__)


class UpdateStreamError(RuntimeError):
    """The endpoint did not return a streamable body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


async def check_response(response: httpx.Response) -> None:
    """Fail fast on responses that cannot be streamed.

    Raises:
        UpdateStreamError: On a non-2xx status (message taken from the JSON
            body's ``message`` when available) or when the body is missing.
    """
    if not response.is_success:
        fallback = (
            f"Request failed with status code {response.status_code}: "
            f"{response.reason_phrase}"
        )
        message = fallback
        try:
            await response.aread()
            body = response.json()
            if isinstance(body, dict) and body.get("message"):
                message = body["message"]
        except (ValueError, httpx.HTTPError, httpx.StreamError):
            logger.debug("Error body is not JSON; using status text")
        finally:
            await response.aclose()

        logger.warning("Update stream request failed: %s", message)
        raise UpdateStreamError(str(message), status_code=response.status_code)

    if response.status_code == 204 or response.headers.get("content-length") == "0":
        await response.aclose()
        raise UpdateStreamError("Body not defined", status_code=response.status_code)


class UpdateStream:
    """Async iterator over the processed updates of one streamed response.

    Must be created inside a running event loop. Use as an async context
    manager, or call aclose(), to release the connection early.
    """

    def __init__(
        self,
        reader: ChunkReader,
        abort: AbortController | None = None,
        *,
        smooth: bool = False,
        config: StreamingConfig | None = None,
        pacer: SmoothPacer | None = None,
    ) -> None:
        config = config or StreamingConfig()
        self._reader = reader
        self._signal = abort or AbortController()
        self._abort = AbortController()
        self._release: asyncio.Future[None] | None = None
        self._closed = False
        self.stats = FramingStats()

        self._abort.add_listener(self._on_abort)
        self._abort.link(self._signal)

        self._chunks = read_chunks(reader, self._abort)
        updates: AsyncIterator[MessageUpdate] = decode_updates(self._chunks, stats=self.stats)
        if smooth:
            pacer = pacer or SmoothPacer(
                frame_interval=config.frame_interval,
                start_speed=config.start_speed,
                idle_timeout=config.idle_timeout,
            )
            updates = pacer.run(coalesce_words(updates, max_merge=config.max_merge))
        self._updates = updates

    @property
    def signal(self) -> AbortController:
        """The caller-facing abort signal."""
        return self._signal

    def __aiter__(self) -> UpdateStream:
        return self

    async def __anext__(self) -> MessageUpdate:
        if self._signal.aborted or self._closed:
            await self.aclose()
            raise StopAsyncIteration

        try:
            update = await anext(self._updates)
        except StopAsyncIteration:
            await self._release_reader()
            logger.info(
                "Update stream ended (%d records, %d dropped)",
                self.stats.records, self.stats.dropped,
            )
            raise
        except Exception:
            self._abort.abort("pipeline error")
            await self._release_reader()
            raise

        if self._signal.aborted:
            await self.aclose()
            raise StopAsyncIteration
        return update

    async def aclose(self) -> None:
        """Stop all stages and release the reader."""
        if self._closed:
            return
        self._closed = True
        self._abort.abort("closed")
        await self._updates.aclose()  # type: ignore[attr-defined]
        await self._chunks.aclose()
        await self._release_reader()

    async def __aenter__(self) -> UpdateStream:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def _on_abort(self, reason: str) -> None:
        logger.debug("Update stream aborted: %s", reason)
        if self._release is None:
            self._release = asyncio.ensure_future(self._reader.cancel())

    async def _release_reader(self) -> None:
        if self._release is None:
            self._release = asyncio.ensure_future(self._reader.cancel())
        await self._release


async def open_update_stream(
    response: httpx.Response,
    abort: AbortController | None = None,
    *,
    smooth: bool | None = None,
    config: StreamingConfig | None = None,
) -> UpdateStream:
    """Validate a streamed response and wrap it in the update pipeline.

    Args:
        response: A response opened with ``stream=True``.
        abort: Caller's cancellation signal.
        smooth: Apply word coalescing and pacing. Defaults to
            ``config.smooth_updates``.
        config: Streaming settings. Defaults to StreamingConfig().

    Returns:
        An UpdateStream yielding MessageUpdates.

    Raises:
        UpdateStreamError: If the response is not a streamable success.
    """
    config = config or StreamingConfig()
    await check_response(response)

    use_smooth = config.smooth_updates if smooth is None else smooth
    logger.info("Streaming updates (status %d, smooth=%s)", response.status_code, use_smooth)
    return UpdateStream(ResponseReader(response), abort, smooth=use_smooth, config=config)
