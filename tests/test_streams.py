from __future__ import annotations

import asyncio

from filehost.streams import PeekableStream, iter_bytes


async def _drain(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


def test_peek_does_not_consume() -> None:
    async def scenario():
        stream = PeekableStream(iter_bytes(b"abcdefghij", chunk_size=3))
        first = await stream.peek(4)
        again = await stream.peek(4)
        return first, again, await _drain(stream)

    first, again, rest = asyncio.run(scenario())
    assert first == b"abcd"
    assert again == b"abcd"
    assert rest == b"abcdefghij"


def test_peek_past_end_returns_everything() -> None:
    async def scenario():
        stream = PeekableStream(iter_bytes(b"short"))
        return await stream.peek(128), await _drain(stream)

    assert asyncio.run(scenario()) == (b"short", b"short")


def test_empty_chunks_are_skipped() -> None:
    async def source():
        for chunk in (b"", b"ab", b"", b"cd", b""):
            yield chunk

    async def scenario():
        stream = PeekableStream(source())
        return await stream.peek(3), await _drain(stream)

    assert asyncio.run(scenario()) == (b"abc", b"abcd")
