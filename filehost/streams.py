from __future__ import annotations

from typing import AsyncIterable, AsyncIterator, List


class PeekableStream:
    """
    Async byte stream that can look at its first bytes without consuming them.

    ``peek`` pulls chunks from the source until it holds ``size`` bytes (or the
    source ends); iterating afterwards replays those chunks before continuing
    with the rest of the source.
    """

    def __init__(self, source: AsyncIterable[bytes]) -> None:
        self._source = source.__aiter__()
        self._buffered: List[bytes] = []
        self._buffered_len = 0
        self._exhausted = False

    async def peek(self, size: int) -> bytes:
        while self._buffered_len < size and not self._exhausted:
            try:
                chunk = await self._source.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
                break
            if chunk:
                self._buffered.append(chunk)
                self._buffered_len += len(chunk)
        return b"".join(self._buffered)[:size]

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        while self._buffered:
            chunk = self._buffered.pop(0)
            self._buffered_len -= len(chunk)
            yield chunk
        if self._exhausted:
            return
        async for chunk in self._source:
            if chunk:
                yield chunk


async def iter_bytes(data: bytes, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
    """Present an in-memory payload as an async chunk stream."""
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]
