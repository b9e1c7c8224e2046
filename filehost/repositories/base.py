from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..models import ApiKey, FileRecord


class ApiKeyRepository(ABC):
    """
    Read side used by the key validator, plus the provisioning calls the
    admin CLI needs. The service itself never writes keys.
    """

    @abstractmethod
    async def get_by_secret(self, secret_value: str) -> Optional[ApiKey]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, owner_label: str, secret_value: str, expires_at: datetime) -> ApiKey:
        raise NotImplementedError

    @abstractmethod
    async def list(self) -> List[ApiKey]:
        raise NotImplementedError


class FileRepository(ABC):
    """
    File metadata records. ``create`` must reject a second record with the
    same content hash by raising ``DuplicateContent``.
    """

    @abstractmethod
    async def create(self, record: FileRecord) -> str:
        raise NotImplementedError

    @abstractmethod
    async def get(self, file_id: str) -> Optional[FileRecord]:
        raise NotImplementedError

    @abstractmethod
    async def get_id_by_hash(self, content_hash: str) -> Optional[str]:
        raise NotImplementedError
