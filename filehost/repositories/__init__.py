from .base import ApiKeyRepository, FileRepository
from .in_memory import InMemoryApiKeyRepository, InMemoryFileRepository
from .sql import SqlApiKeyRepository, SqlFileRepository

__all__ = [
    "ApiKeyRepository",
    "FileRepository",
    "InMemoryApiKeyRepository",
    "InMemoryFileRepository",
    "SqlApiKeyRepository",
    "SqlFileRepository",
]
