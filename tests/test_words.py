"""Tests for the word coalescer."""

from __future__ import annotations

import pytest

from updatestream.schemas.updates import StatusUpdate, StreamUpdate, ToolUpdate
from updatestream.streaming.words import begins_word, coalesce_words, ends_word


def _s(token: str) -> StreamUpdate:
    return StreamUpdate(token=token)


async def _aiter(items):
    for item in items:
        yield item


async def _coalesce(items, **kwargs) -> list:
    return [u async for u in coalesce_words(_aiter(items), **kwargs)]


def _tokens(updates) -> list[str]:
    return [u.token for u in updates]


class TestWordClasses:
    @pytest.mark.parametrize("token", ["what", "don", "'", "`", "9", "café", "ž"])
    def test_ends_word(self, token):
        assert ends_word(token)

    @pytest.mark.parametrize("token", ["what ", "end.", "", "你", "ок"])
    def test_does_not_end_word(self, token):
        assert not ends_word(token)

    @pytest.mark.parametrize("token", ["'t", "s", "É", "`x"])
    def test_begins_word(self, token):
        assert begins_word(token)

    @pytest.mark.parametrize("token", [" don", ",", "", "好", "\n"])
    def test_does_not_begin_word(self, token):
        assert not begins_word(token)


class TestCoalesceWords:
    @pytest.mark.asyncio
    async def test_contraction_merged(self):
        """Scenario: "what" " don" "'t" becomes "what" " don't"."""
        out = await _coalesce([_s("what"), _s(" don"), _s("'t")])
        assert _tokens(out) == ["what", " don't"]

    @pytest.mark.asyncio
    async def test_latin_extended_merged(self):
        out = await _coalesce([_s(" caf"), _s("é"), _s("s")])
        assert _tokens(out) == [" cafés"]

    @pytest.mark.asyncio
    async def test_group_capped(self):
        out = await _coalesce([_s(c) for c in "abcdef"])
        assert _tokens(out) == ["abcde", "f"]

    @pytest.mark.asyncio
    async def test_custom_cap(self):
        out = await _coalesce([_s(c) for c in "abcdef"], max_merge=2)
        assert _tokens(out) == ["ab", "cd", "ef"]

    @pytest.mark.asyncio
    async def test_non_latin_not_merged(self):
        out = await _coalesce([_s("你"), _s("好"), _s("世界")])
        assert _tokens(out) == ["你", "好", "世界"]

    @pytest.mark.asyncio
    async def test_never_merges_across_structural_update(self):
        tool = ToolUpdate(subtype="call", uuid="t1")
        out = await _coalesce([_s("foo"), tool, _s("bar")])
        assert out[0] == _s("foo")
        assert out[1] is tool
        assert out[2] == _s("bar")

    @pytest.mark.asyncio
    async def test_structural_updates_pass_through_in_order(self):
        status = StatusUpdate(status="started")
        tool = ToolUpdate(subtype="result", uuid="t1")
        items = [status, _s("He"), _s("llo"), tool, _s(" wor"), _s("ld"), _s("!")]
        out = await _coalesce(items)

        assert [u for u in out if not isinstance(u, StreamUpdate)] == [status, tool]
        assert out[0] is status
        assert "".join(u.token for u in out if isinstance(u, StreamUpdate)) == "Hello world!"
        assert _tokens(out[1:2]) == ["Hello"]
        assert _tokens(out[3:]) == [" world", "!"]

    @pytest.mark.asyncio
    async def test_single_fragment_passed_through(self):
        fragment = _s("hello")
        out = await _coalesce([fragment])
        assert out == [fragment]

    @pytest.mark.asyncio
    async def test_trailing_group_flushed(self):
        out = await _coalesce([_s("a"), _s("b")])
        assert _tokens(out) == ["ab"]

    @pytest.mark.asyncio
    async def test_empty_input(self):
        assert await _coalesce([]) == []

    @pytest.mark.asyncio
    async def test_text_preserved(self):
        tokens = ["The", " qu", "ick", " br", "own", " fox", "'s", " j", "u", "m", "p", "s", "."]
        out = await _coalesce([_s(t) for t in tokens])
        assert "".join(_tokens(out)) == "".join(tokens)
        assert len(out) < len(tokens)
