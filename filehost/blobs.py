from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Union

import aiofiles
import aiofiles.os

from .errors import InternalError

log = logging.getLogger(__name__)

STAGING_DIR = ".staging"


@dataclass
class StagedBlob:
    path: Path
    committed: bool = False

    def open(self):
        return aiofiles.open(self.path, "wb")


class LocalBlobStore:
    """
    Blobs live flat under ``root`` as ``<id>.<ext>``.

    Uploads are first written to ``root/.staging`` and moved into place with
    a same-filesystem rename, so a blob path either holds a complete file or
    does not exist.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).expanduser().resolve()
        self.staging_dir = self.root / STAGING_DIR

    async def ensure_root(self) -> None:
        await aiofiles.os.makedirs(self.staging_dir, exist_ok=True)

    def path_for(self, file_name: str) -> Path:
        path = (self.root / file_name).resolve()
        if path.parent != self.root:
            raise InternalError(f"Refusing blob path outside upload root: {file_name!r}")
        return path

    @asynccontextmanager
    async def staging(self) -> AsyncIterator[StagedBlob]:
        await self.ensure_root()
        staged = StagedBlob(path=self.staging_dir / f"{uuid.uuid4().hex}.part")
        try:
            yield staged
        finally:
            if not staged.committed and await aiofiles.os.path.exists(staged.path):
                await aiofiles.os.remove(staged.path)

    async def commit(self, staged: StagedBlob, file_name: str) -> Path:
        target = self.path_for(file_name)
        try:
            await aiofiles.os.replace(staged.path, target)
        except OSError as exc:
            log.error("Failed to move %s into place: %s", staged.path, exc, exc_info=True)
            raise InternalError("Failed to upload file", cause=exc) from exc
        staged.committed = True
        return target

    async def remove(self, file_name: str) -> None:
        path = self.path_for(file_name)
        if await aiofiles.os.path.exists(path):
            await aiofiles.os.remove(path)

    async def exists(self, file_name: str) -> bool:
        return await aiofiles.os.path.isfile(self.path_for(file_name))

    async def iter_file(self, file_name: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        async with aiofiles.open(self.path_for(file_name), "rb") as fh:
            while True:
                chunk = await fh.read(chunk_size)
                if not chunk:
                    break
                yield chunk
