from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Request, Security
from fastapi.security.api_key import APIKeyHeader

from .auth import API_KEY_HEADER, KeyValidator
from .blobs import LocalBlobStore
from .classifier import ContentClassifier
from .config import Settings
from .database import Database
from .models import ValidatedIdentity
from .repositories import (
    ApiKeyRepository,
    FileRepository,
    InMemoryApiKeyRepository,
    InMemoryFileRepository,
    SqlApiKeyRepository,
    SqlFileRepository,
)
from .service import FileStore, RetrievalService


@dataclass
class Services:
    db: Optional[Database]
    keys: ApiKeyRepository
    blobs: LocalBlobStore
    key_validator: KeyValidator
    file_store: FileStore
    retrieval: RetrievalService

    async def close(self) -> None:
        if self.db is not None:
            await self.db.dispose()


def build_services(settings: Settings) -> Services:
    db: Optional[Database] = None
    keys: ApiKeyRepository
    files: FileRepository
    if settings.USE_DATABASE:
        db = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)
        keys, files = SqlApiKeyRepository(db), SqlFileRepository(db)
    else:
        keys, files = InMemoryApiKeyRepository(), InMemoryFileRepository()
    blobs = LocalBlobStore(settings.UPLOAD_PATH)
    return Services(
        db=db,
        keys=keys,
        blobs=blobs,
        key_validator=KeyValidator(keys),
        file_store=FileStore(
            files,
            blobs,
            classifier=ContentClassifier(),
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
            peek_bytes=settings.PEEK_BYTES,
        ),
        retrieval=RetrievalService(files, blobs, chunk_size=settings.CHUNK_SIZE_BYTES),
    )


api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False, description="Requires an API key to access")


def get_services(request: Request) -> Services:
    return request.app.state.services


async def require_api_key(
    services: Annotated[Services, Depends(get_services)],
    api_key: Optional[str] = Security(api_key_header),
) -> ValidatedIdentity:
    return await services.key_validator.validate(api_key)


ServicesDep = Annotated[Services, Depends(get_services)]
Identity = Annotated[ValidatedIdentity, Depends(require_api_key)]
