from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from ..errors import DuplicateContent, InternalError
from ..models import ApiKey, FileRecord
from .base import ApiKeyRepository, FileRepository


class InMemoryApiKeyRepository(ApiKeyRepository):
    def __init__(self) -> None:
        self._keys: Dict[str, ApiKey] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def get_by_secret(self, secret_value: str) -> Optional[ApiKey]:
        async with self._lock:
            return self._keys.get(secret_value)

    async def create(self, owner_label: str, secret_value: str, expires_at: datetime) -> ApiKey:
        async with self._lock:
            key = ApiKey(id=self._next_id, owner_label=owner_label, secret_value=secret_value, expires_at=expires_at)
            self._keys[secret_value] = key
            self._next_id += 1
            return key

    async def list(self) -> List[ApiKey]:
        async with self._lock:
            return sorted(self._keys.values(), key=lambda k: k.id)


class InMemoryFileRepository(FileRepository):
    """Dict-backed store with the same hash uniqueness rule as the SQL table."""

    def __init__(self) -> None:
        self._records: Dict[str, FileRecord] = {}
        self._by_hash: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def create(self, record: FileRecord) -> str:
        async with self._lock:
            if record.content_hash in self._by_hash:
                raise DuplicateContent(record.content_hash)
            if record.id in self._records:
                raise InternalError(f"file id {record.id} already assigned")
            self._records[record.id] = replace(record)
            self._by_hash[record.content_hash] = record.id
            return record.id

    async def get(self, file_id: str) -> Optional[FileRecord]:
        async with self._lock:
            record = self._records.get(file_id)
            return replace(record) if record else None

    async def get_id_by_hash(self, content_hash: str) -> Optional[str]:
        async with self._lock:
            return self._by_hash.get(content_hash)
