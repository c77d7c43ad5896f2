"""Cooperative cancellation signal shared by the pipeline stages.

An AbortController fires at most once. Listeners registered on it run
synchronously when it fires; coroutines can await it with wait().
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

# Type alias for abort listener callbacks; receives the abort reason
AbortListener = Callable[[str], Any]


class AbortController:
    """One-shot abort signal with listeners.

    Usage:
        abort = AbortController()
        stream = await open_update_stream(response, abort)
        ...
        abort.abort("user cancelled")
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._listeners: list[AbortListener] = []
        self._reason: str | None = None

    @property
    def aborted(self) -> bool:
        """Whether abort() has been called."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """The reason passed to the first abort() call."""
        return self._reason

    def abort(self, reason: str = "aborted") -> None:
        """Fire the signal. Calls after the first are no-ops.

        Listener exceptions are logged but never propagate.
        """
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            try:
                listener(reason)
            except Exception:
                logger.exception("Abort listener error (%s)", reason)

    def add_listener(self, listener: AbortListener) -> None:
        """Register a listener. Runs immediately if already aborted."""
        if self._event.is_set():
            listener(self._reason or "aborted")
            return
        self._listeners.append(listener)

    def remove_listener(self, listener: AbortListener) -> None:
        """Remove a previously registered listener."""
        self._listeners = [ln for ln in self._listeners if ln != listener]

    def link(self, source: AbortController) -> None:
        """Abort this controller whenever source aborts."""
        source.add_listener(self.abort)

    async def wait(self) -> str:
        """Suspend until the signal fires and return its reason."""
        await self._event.wait()
        return self._reason or "aborted"
