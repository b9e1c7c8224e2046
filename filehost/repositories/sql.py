from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..database import Database
from ..errors import DuplicateContent, InternalError
from ..models import ApiKey, FileRecord, TypeCode, as_utc
from ..sql_models import ApiKeyModel, FileModel
from .base import ApiKeyRepository, FileRepository

log = logging.getLogger(__name__)


def _to_api_key(row: ApiKeyModel) -> ApiKey:
    return ApiKey(
        id=row.id,
        owner_label=row.key_owner,
        secret_value=row.apikey,
        expires_at=as_utc(row.expires_at),
    )


def _to_record(row: FileModel) -> FileRecord:
    return FileRecord(
        id=row.id,
        file_name=row.file_name,
        display_name=row.display_name,
        content_hash=row.file_hash,
        type_code=TypeCode(row.file_type),
        size_bytes=row.file_size,
        owner_key=row.uploader,
        created_at=as_utc(row.upload_date),
    )


class SqlApiKeyRepository(ApiKeyRepository):
    def __init__(self, db: Database) -> None:
        self.db = db

    async def get_by_secret(self, secret_value: str) -> Optional[ApiKey]:
        try:
            async with self.db.session_factory() as session:
                row = await session.scalar(select(ApiKeyModel).where(ApiKeyModel.apikey == secret_value))
        except SQLAlchemyError as exc:
            log.error("API key lookup failed: %s", exc, exc_info=True)
            raise InternalError("Failed to look up API key", cause=exc) from exc
        return _to_api_key(row) if row else None

    async def create(self, owner_label: str, secret_value: str, expires_at: datetime) -> ApiKey:
        row = ApiKeyModel(key_owner=owner_label, apikey=secret_value, expires_at=as_utc(expires_at))
        try:
            async with self.db.session_factory() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
        except SQLAlchemyError as exc:
            raise InternalError("Failed to create API key", cause=exc) from exc
        return _to_api_key(row)

    async def list(self) -> List[ApiKey]:
        try:
            async with self.db.session_factory() as session:
                rows = await session.scalars(select(ApiKeyModel).order_by(ApiKeyModel.id))
                return [_to_api_key(row) for row in rows]
        except SQLAlchemyError as exc:
            raise InternalError("Failed to list API keys", cause=exc) from exc


class SqlFileRepository(FileRepository):
    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(self, record: FileRecord) -> str:
        row = FileModel(
            id=record.id,
            file_name=record.file_name,
            display_name=record.display_name,
            file_hash=record.content_hash,
            file_type=int(record.type_code),
            file_size=record.size_bytes,
            uploader=record.owner_key,
            upload_date=record.created_at,
        )
        try:
            async with self.db.session_factory() as session:
                session.add(row)
                await session.commit()
        except IntegrityError as exc:
            # Either the hash index or the primary key fired; only the former is a duplicate.
            if await self.get_id_by_hash(record.content_hash):
                raise DuplicateContent(record.content_hash) from exc
            log.error("File insert violated a constraint: %s", exc, exc_info=True)
            raise InternalError("Failed to save file record", cause=exc) from exc
        except SQLAlchemyError as exc:
            log.error("File insert failed: %s", exc, exc_info=True)
            raise InternalError("Failed to save file record", cause=exc) from exc
        return record.id

    async def get(self, file_id: str) -> Optional[FileRecord]:
        try:
            async with self.db.session_factory() as session:
                row = await session.get(FileModel, file_id)
        except SQLAlchemyError as exc:
            log.error("File lookup failed: %s", exc, exc_info=True)
            raise InternalError("Failed to look up file", cause=exc) from exc
        return _to_record(row) if row else None

    async def get_id_by_hash(self, content_hash: str) -> Optional[str]:
        try:
            async with self.db.session_factory() as session:
                return await session.scalar(select(FileModel.id).where(FileModel.file_hash == content_hash))
        except SQLAlchemyError as exc:
            log.error("Hash lookup failed: %s", exc, exc_info=True)
            raise InternalError("Failed to look up content hash", cause=exc) from exc
