from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterable, Awaitable, Protocol

from blake3 import blake3

from .errors import PayloadTooLarge


class AsyncSink(Protocol):
    def write(self, data: bytes) -> Awaitable[int]:
        ...


@dataclass(frozen=True)
class HashedPayload:
    digest: str
    size_bytes: int


class HashingGate:
    """
    Single pass over an upload: count, hash and forward every chunk.

    The digest is computed over exactly the chunks handed to ``sink`` and in
    the same order, so the stored blob always matches its hash. A chunk that
    would push the total past ``limit_bytes`` is neither hashed nor written.
    """

    async def consume(self, stream: AsyncIterable[bytes], limit_bytes: int, sink: AsyncSink) -> HashedPayload:
        hasher = blake3()
        total = 0
        async for chunk in stream:
            total += len(chunk)
            if total > limit_bytes:
                raise PayloadTooLarge(limit_bytes)
            hasher.update(chunk)
            await sink.write(chunk)
        return HashedPayload(digest=hasher.hexdigest(), size_bytes=total)
