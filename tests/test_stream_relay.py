"""
Tests for the chat streaming relay.
"""
import asyncio
import json

import pytest

from nutriplan.core.errors import EmptyResponseError
from nutriplan.models.diet import ChatMessage
from nutriplan.services.stream_relay import build_chat_turns, encode_fragment, open_relay


class FragmentSource:
    """Async generator wrapper that records whether it was closed."""

    def __init__(self, fragments, fail_after=None):
        self.fragments = fragments
        self.fail_after = fail_after
        self.closed = False

    async def generate(self):
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_after is not None and i == self.fail_after:
                    raise RuntimeError("connection reset")
                yield fragment
        finally:
            self.closed = True


async def _collect(body):
    return [chunk async for chunk in body]


class TestBuildChatTurns:
    """Tests for build_chat_turns."""

    def test_maps_roles_and_appends_message(self):
        history = [
            ChatMessage(sender="user", text="What is a macro?"),
            ChatMessage(sender="ai", text="Protein, carbs and fat."),
            ChatMessage(sender="user", text="Thanks"),
        ]
        turns = build_chat_turns(history, "And fiber?")
        assert [(t.role, t.text) for t in turns] == [
            ("user", "What is a macro?"),
            ("model", "Protein, carbs and fat."),
            ("user", "Thanks"),
            ("user", "And fiber?"),
        ]

    def test_empty_history(self):
        turns = build_chat_turns([], "Hi")
        assert [(t.role, t.text) for t in turns] == [("user", "Hi")]


class TestOpenRelay:
    """Tests for open_relay."""

    def test_fragments_forwarded_in_order(self):
        source = FragmentSource(["Hel", "lo", "!"])

        async def run():
            return await _collect(await open_relay(source.generate()))

        chunks = asyncio.run(run())

        assert all(chunk.endswith(b"\n") for chunk in chunks)
        body = b"".join(chunks).decode("utf-8")
        text = "".join(json.loads(line)["text"] for line in body.split("\n") if line)
        assert text == "Hello!"
        assert source.closed

    def test_empty_fragments_skipped(self):
        source = FragmentSource(["", "Hi", "", "there"])

        async def run():
            return await _collect(await open_relay(source.generate()))

        assert asyncio.run(run()) == [encode_fragment("Hi"), encode_fragment("there")]

    def test_no_text_is_empty_response(self):
        source = FragmentSource(["", ""])

        async def run():
            await open_relay(source.generate())

        with pytest.raises(EmptyResponseError):
            asyncio.run(run())

    def test_failure_before_first_fragment_raises_early(self):
        source = FragmentSource(["never"], fail_after=0)

        async def run():
            await open_relay(source.generate())

        with pytest.raises(RuntimeError, match="connection reset"):
            asyncio.run(run())
        assert source.closed

    def test_failure_mid_stream_propagates(self):
        source = FragmentSource(["a", "b", "c"], fail_after=2)
        received = []

        async def run():
            body = await open_relay(source.generate())
            async for chunk in body:
                received.append(chunk)

        with pytest.raises(RuntimeError, match="connection reset"):
            asyncio.run(run())
        assert received == [encode_fragment("a"), encode_fragment("b")]
        assert source.closed

    def test_consumer_stopping_closes_upstream(self):
        source = FragmentSource(["a", "b", "c"])

        async def run():
            body = await open_relay(source.generate())
            await body.__anext__()
            await body.aclose()

        asyncio.run(run())
        assert source.closed


class TestEncodeFragment:
    """Tests for encode_fragment."""

    def test_escapes_newlines(self):
        line = encode_fragment("line one\nline two")
        assert line.count(b"\n") == 1
        assert json.loads(line) == {"text": "line one\nline two"}
