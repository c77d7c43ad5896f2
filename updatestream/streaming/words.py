"""Merge sub-word text fragments into word-sized stream updates.

Example: "what" " don" "'t" => "what" " don't"

Two adjacent fragments are glued only when the first ends and the second
begins with a word character. Only Latin scripts are recognised; text in
other scripts is flushed fragment by fragment.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterable, AsyncIterator

from updatestream.schemas.updates import MessageUpdate, StreamUpdate

# ASCII letters/digits, Latin-1 Supplement and Latin Extended-A, ' and `
_WORD_CHARS = "a-zA-Z0-9À-ž'`"
_ENDS_WORD_RE = re.compile(f"[{_WORD_CHARS}]$")
_BEGINS_WORD_RE = re.compile(f"^[{_WORD_CHARS}]")

MAX_MERGE = 5


def ends_word(token: str) -> bool:
    """True when the token's last character can continue a word."""
    return _ENDS_WORD_RE.search(token) is not None


def begins_word(token: str) -> bool:
    """True when the token's first character can continue a word."""
    return _BEGINS_WORD_RE.match(token) is not None


def _join(group: list[StreamUpdate]) -> StreamUpdate:
    if len(group) == 1:
        return group[0]
    return StreamUpdate(token="".join(u.token for u in group))


async def coalesce_words(
    updates: AsyncIterable[MessageUpdate],
    *,
    max_merge: int = MAX_MERGE,
) -> AsyncIterator[MessageUpdate]:
    """Re-emit updates with adjacent word fragments merged.

    Non-stream updates are emitted unchanged and in order, after flushing any
    pending text so the UI never stalls mid-word behind a tool call.

    Args:
        updates: Decoded update stream.
        max_merge: Max fragments combined into one group before a forced flush.

    Yields:
        Merged StreamUpdates interleaved with the untouched non-stream updates.
    """
    group: list[StreamUpdate] = []

    async for update in updates:
        if not isinstance(update, StreamUpdate):
            if group:
                yield _join(group)
                group = []
            yield update
            continue

        if (
            group
            and len(group) < max_merge
            and ends_word(group[-1].token)
            and begins_word(update.token)
        ):
            group.append(update)
            continue

        if group:
            yield _join(group)
        group = [update]

    if group:
        yield _join(group)
