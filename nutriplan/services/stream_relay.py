"""
Chat streaming relay.

Fragments from the completion service are forwarded to the client as
newline-delimited JSON, one {"text": ...} object per line, in arrival order.
"""
import json
from typing import AsyncGenerator, AsyncIterator

from nutriplan.core.errors import EmptyResponseError
from nutriplan.core.logger import logger, log_error
from nutriplan.models.diet import ChatMessage, ChatTurn


NDJSON_MEDIA_TYPE = "application/x-ndjson"


def build_chat_turns(history: list[ChatMessage], message: str) -> list[ChatTurn]:
    """
    Map client chat history to completion turns and append the new message.

    Messages sent by the user become "user" turns, everything else becomes a
    "model" turn. Order is preserved.
    """
    turns = [
        ChatTurn(role="user" if h.sender == "user" else "model", text=h.text)
        for h in history
    ]
    turns.append(ChatTurn(role="user", text=message))
    return turns


def encode_fragment(text: str) -> bytes:
    return (json.dumps({"text": text}) + "\n").encode("utf-8")


async def open_relay(fragments: AsyncGenerator[str, None]) -> AsyncIterator[bytes]:
    """
    Start relaying a fragment stream.

    The first fragment is awaited before returning, so failures opening the
    upstream stream still surface as ordinary exceptions (and a JSON error)
    rather than a truncated body.

    Raises:
        EmptyResponseError: If the upstream stream ends without any text
    """
    first = None
    try:
        while not first:
            first = await anext(fragments)
    except StopAsyncIteration:
        raise EmptyResponseError()
    except BaseException:
        await fragments.aclose()
        raise

    return _relay(first, fragments)


async def _relay(first: str, fragments: AsyncGenerator[str, None]) -> AsyncIterator[bytes]:
    count = 1
    try:
        yield encode_fragment(first)
        async for fragment in fragments:
            if fragment:
                count += 1
                yield encode_fragment(fragment)
        logger.info(f"Chat stream complete ({count} fragments)")
    except Exception as e:
        # Headers are already sent: re-raising makes the server drop the
        # connection so the client sees a truncated stream
        log_error("Chat stream", e)
        raise
    finally:
        # Also runs when the client disconnects and the response is cancelled
        await fragments.aclose()
