from __future__ import annotations

import asyncio
from datetime import timedelta
from pathlib import Path

import pytest

from filehost.blobs import LocalBlobStore
from filehost.config import Settings
from filehost.database import Database
from filehost.models import ValidatedIdentity, utcnow
from filehost.repositories import SqlApiKeyRepository

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_HEADER = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00"
GIF_HEADER = b"GIF89a"
FLAC_HEADER = b"fLaC\x00\x00\x00\x22"

VALID_KEY = "valid-test-key"
EXPIRED_KEY = "expired-test-key"


def png_bytes(tail: bytes = b"\x00\x01") -> bytes:
    return PNG_SIGNATURE + tail


def stored_blobs(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted(p for p in root.iterdir() if p.is_file())


@pytest.fixture()
def blobs(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "upload")


@pytest.fixture()
def owner() -> ValidatedIdentity:
    return ValidatedIdentity(key_id=1, owner_label="tests")


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'filehost.db'}"


@pytest.fixture()
def settings(tmp_path: Path, database_url: str) -> Settings:
    return Settings(
        DATABASE_URL=database_url,
        UPLOAD_PATH=str(tmp_path / "upload"),
        PUBLIC_BASE_URL="http://testserver",
        MAX_UPLOAD_BYTES=4096,
        CHUNK_SIZE_BYTES=1024,
    )


@pytest.fixture()
def provisioned_keys(database_url: str) -> dict[str, str]:
    async def provision() -> None:
        db = Database(database_url)
        try:
            await db.create_all()
            keys = SqlApiKeyRepository(db)
            await keys.create("alice", VALID_KEY, utcnow() + timedelta(days=30))
            await keys.create("bob", EXPIRED_KEY, utcnow() - timedelta(seconds=1))
        finally:
            await db.dispose()

    asyncio.run(provision())
    return {"valid": VALID_KEY, "expired": EXPIRED_KEY}
