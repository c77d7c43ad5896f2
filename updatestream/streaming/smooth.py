"""Typewriter pacing for the message update stream.

Uses frame-based timing with dynamic speed adjustment:

- Text is queued character by character and released a few characters per
  frame (~60fps), so bursty upstreams still render as steady typing.
- The speed tracks the backlog: a long queue speeds playback up so the
  animation never falls permanently behind, a short one slows it down.
- Non-stream updates (tools, status, ...) are released at the next frame,
  preceded by any text that was queued before them.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections import deque
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field

from updatestream.schemas.updates import MessageUpdate, StreamUpdate

logger = logging.getLogger(__name__)

FRAME_INTERVAL = 0.016  # seconds, ~60fps
START_SPEED = 30.0  # characters per second
IDLE_TIMEOUT = 0.1  # seconds

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[object]]


@dataclass
class PacingQueue:
    """Characters and structural updates waiting to be released.

    Written only by the producer, read only by the consumer. Each structural
    update is stored with the number of characters enqueued before it.
    """

    chars: deque[str] = field(default_factory=deque)
    structural: deque[tuple[int, MessageUpdate]] = field(default_factory=deque)
    enqueued: int = 0
    emitted: int = 0
    finished: bool = False
    wakeup: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def drained(self) -> bool:
        return self.finished and not self.chars and not self.structural

    def push_text(self, token: str) -> None:
        self.chars.extend(token)
        self.enqueued += len(token)
        self.wakeup.set()

    def push_structural(self, update: MessageUpdate) -> None:
        self.structural.append((self.enqueued, update))
        self.wakeup.set()

    def finish(self) -> None:
        self.finished = True
        self.wakeup.set()

    def take(self, count: int) -> str:
        """Remove up to count characters from the front of the queue."""
        count = min(count, len(self.chars))
        self.emitted += count
        return "".join(self.chars.popleft() for _ in range(count))


class SmoothPacer:
    """Re-emits an update stream at a human-readable typing cadence.

    The clock and sleep functions are injectable so tests can drive the
    frame loop with simulated time.
    """

    def __init__(
        self,
        *,
        frame_interval: float = FRAME_INTERVAL,
        start_speed: float = START_SPEED,
        idle_timeout: float = IDLE_TIMEOUT,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._frame_interval = frame_interval
        self._start_speed = start_speed
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._sleep = sleep

    async def run(self, updates: AsyncIterable[MessageUpdate]) -> AsyncIterator[MessageUpdate]:
        """Consume updates in a background task and yield them paced.

        Completes once upstream is exhausted and every queued character and
        structural update has been yielded. An exception raised by upstream
        is re-raised after the queued data has been released.
        """
        queue = PacingQueue()
        producer = asyncio.create_task(self._produce(updates, queue))

        speed = self._start_speed
        last_queue_length = 0
        accumulated = 0.0
        last_frame = self._clock()

        try:
            while not queue.drained:
                while queue.structural:
                    position, update = queue.structural.popleft()
                    backlog = position - queue.emitted
                    if backlog > 0:
                        yield StreamUpdate(token=queue.take(backlog))
                    yield update

                if queue.chars:
                    now = self._clock()
                    accumulated += now - last_frame
                    last_frame = now

                    queue_length = len(queue.chars)
                    target_speed = max(self._start_speed, queue_length)
                    # Larger swings in the backlog adapt faster
                    rate = min(1.0, abs(queue_length - last_queue_length) * 0.0008 + 0.005)
                    speed += (target_speed - speed) * rate

                    count = math.floor(accumulated * speed)
                    if count > 0:
                        accumulated -= count / speed
                        yield StreamUpdate(token=queue.take(count))

                    last_queue_length = len(queue.chars)
                    await self._sleep(self._frame_interval)
                elif not queue.finished:
                    await self._wait_for_data(queue.wakeup)
                    last_frame = self._clock()

            await producer
        finally:
            if not producer.done():
                producer.cancel()
            await asyncio.gather(producer, return_exceptions=True)

    async def _produce(
        self, updates: AsyncIterable[MessageUpdate], queue: PacingQueue
    ) -> None:
        try:
            async for update in updates:
                if isinstance(update, StreamUpdate):
                    queue.push_text(update.token)
                else:
                    queue.push_structural(update)
        finally:
            queue.finish()

    async def _wait_for_data(self, wakeup: asyncio.Event) -> None:
        """Wait until the producer signals or the idle timeout elapses."""
        wakeup.clear()
        waiter = asyncio.ensure_future(wakeup.wait())
        timer = asyncio.ensure_future(self._sleep(self._idle_timeout))
        try:
            await asyncio.wait({waiter, timer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            timer.cancel()
            await asyncio.gather(waiter, timer, return_exceptions=True)
        logger.debug("Pacer woke (%s)", "data" if waiter.done() and not waiter.cancelled() else "timeout")


def smooth_updates(
    updates: AsyncIterable[MessageUpdate],
    *,
    frame_interval: float = FRAME_INTERVAL,
    start_speed: float = START_SPEED,
    idle_timeout: float = IDLE_TIMEOUT,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> AsyncIterator[MessageUpdate]:
    """Shorthand for ``SmoothPacer(...).run(updates)``."""
    pacer = SmoothPacer(
        frame_interval=frame_interval,
        start_speed=start_speed,
        idle_timeout=idle_timeout,
        clock=clock,
        sleep=sleep,
    )
    return pacer.run(updates)
