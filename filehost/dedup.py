from __future__ import annotations

from typing import Optional

from .repositories import FileRepository


class DedupIndex:
    """Content hash to file id lookup, read straight from the file records."""

    def __init__(self, files: FileRepository) -> None:
        self.files = files

    async def lookup(self, digest: str) -> Optional[str]:
        return await self.files.get_id_by_hash(digest)
