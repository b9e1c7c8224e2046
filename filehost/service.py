from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterable, AsyncIterator, Callable, Optional

from .blobs import LocalBlobStore
from .classifier import DEFAULT_PEEK_BYTES, ContentClassifier
from .dedup import DedupIndex
from .errors import AlreadyExists, DuplicateContent, InternalError, NotFound
from .hashing import HashingGate
from .models import FileRecord, ValidatedIdentity, utcnow
from .repositories import FileRepository
from .streams import PeekableStream

log = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 1024 * 1024 * 1024
MAX_DISPLAY_NAME = 255


def new_file_id() -> str:
    return uuid.uuid4().hex


class FileStore:
    """
    Ingestion pipeline: classify, hash under the size cap, dedup, commit.

    The steps run strictly in that order. Anything that fails before the
    commit leaves nothing behind: the staged bytes are removed when the
    staging context exits.
    """

    def __init__(
        self,
        files: FileRepository,
        blobs: LocalBlobStore,
        *,
        classifier: Optional[ContentClassifier] = None,
        gate: Optional[HashingGate] = None,
        dedup: Optional[DedupIndex] = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        peek_bytes: int = DEFAULT_PEEK_BYTES,
        id_factory: Callable[[], str] = new_file_id,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.files = files
        self.blobs = blobs
        self.classifier = classifier or ContentClassifier()
        self.gate = gate or HashingGate()
        self.dedup = dedup or DedupIndex(files)
        self.max_upload_bytes = max_upload_bytes
        self.peek_bytes = peek_bytes
        self.id_factory = id_factory
        self.clock = clock

    async def ingest(
        self,
        owner: ValidatedIdentity,
        stream: AsyncIterable[bytes],
        declared_name: Optional[str] = None,
    ) -> FileRecord:
        source = PeekableStream(stream)
        kind = self.classifier.classify(await source.peek(self.peek_bytes), self.peek_bytes)

        async with self.blobs.staging() as staged:
            try:
                async with staged.open() as sink:
                    payload = await self.gate.consume(source, self.max_upload_bytes, sink)
            except OSError as exc:
                log.error("Error staging upload: %s", exc, exc_info=True)
                raise InternalError("Failed to upload file", cause=exc) from exc

            existing_id = await self.dedup.lookup(payload.digest)
            if existing_id:
                log.info("Duplicate upload of %s by key %s", existing_id, owner.key_id)
                raise AlreadyExists(existing_id)

            file_id = self.id_factory()
            record = FileRecord(
                id=file_id,
                file_name=f"{file_id}.{kind.extension}",
                display_name=declared_name[:MAX_DISPLAY_NAME] if declared_name else None,
                content_hash=payload.digest,
                type_code=kind.type_code,
                size_bytes=payload.size_bytes,
                owner_key=owner.key_id,
                created_at=self.clock(),
            )
            await self.blobs.commit(staged, record.file_name)

        try:
            await self.files.create(record)
        except DuplicateContent as exc:
            # Lost a race against an identical upload; the unique index picked the winner.
            await self._discard_blob(record.file_name)
            winner = await self.dedup.lookup(payload.digest)
            if winner is None:
                raise InternalError("Duplicate content reported but no record found", cause=exc) from exc
            raise AlreadyExists(winner) from exc
        except InternalError:
            log.error("Blob %s written but its record was not saved", record.file_name)
            raise

        log.info(
            "Stored %s (%s, %d bytes) for key %s",
            record.id,
            kind.mime,
            record.size_bytes,
            owner.key_id,
        )
        return record

    async def _discard_blob(self, file_name: str) -> None:
        try:
            await self.blobs.remove(file_name)
        except OSError as exc:
            log.warning("Could not remove orphaned blob %s: %s", file_name, exc)


@dataclass
class RetrievedFile:
    record: FileRecord
    media_type: str
    stream: AsyncIterator[bytes]


class RetrievalService:
    def __init__(self, files: FileRepository, blobs: LocalBlobStore, chunk_size: int = 64 * 1024) -> None:
        self.files = files
        self.blobs = blobs
        self.chunk_size = chunk_size

    async def retrieve(self, file_id: str) -> RetrievedFile:
        record = await self.files.get(file_id)
        if record is None:
            raise NotFound()

        if not await self.blobs.exists(record.file_name):
            # Record without its blob: the store is inconsistent.
            log.error("Record %s points at missing blob %s", record.id, record.file_name)
            raise InternalError("Stored file is missing")

        kind = record.media_kind
        return RetrievedFile(
            record=record,
            media_type=kind.mime if kind else "application/octet-stream",
            stream=self.blobs.iter_file(record.file_name, self.chunk_size),
        )
