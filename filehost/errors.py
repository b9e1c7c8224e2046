"""Error taxonomy for ingestion, retrieval and authentication.

Every error carries the HTTP status it maps to and the message shown to the
caller. ``main`` installs a single handler that renders them as plain text.
"""

from __future__ import annotations

from typing import Optional


class FileHostError(Exception):
    status_code: int = 500

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class Unauthenticated(FileHostError):
    """Missing, unknown or expired API key. Never says which."""

    status_code = 401

    def __init__(self, detail: str = "API Key is invalid") -> None:
        super().__init__(detail)


class UnsupportedMediaType(FileHostError):
    status_code = 400

    def __init__(self, kind: str, policy: str = "images") -> None:
        self.kind = kind
        self.policy = policy
        super().__init__(f"This route only accepts {policy} (got {kind})")


class PayloadTooLarge(FileHostError):
    status_code = 400

    def __init__(self, limit_bytes: int) -> None:
        self.limit_bytes = limit_bytes
        super().__init__(f"File is too big. Max size is {format_size(limit_bytes)}.")


class AlreadyExists(FileHostError):
    status_code = 400

    def __init__(self, existing_id: str) -> None:
        self.existing_id = existing_id
        super().__init__(f"This file already exists with an id of {existing_id}")


class NotFound(FileHostError):
    status_code = 404

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)


class InternalError(FileHostError):
    status_code = 500

    def __init__(self, detail: str = "There was an internal server error", cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(detail)


class DuplicateContent(Exception):
    """Raised by repositories when the content hash unique index rejects an insert."""

    def __init__(self, content_hash: str) -> None:
        self.content_hash = content_hash
        super().__init__(f"content hash {content_hash} already stored")


def format_size(num_bytes: int) -> str:
    for unit, size in (("GiB", 1024**3), ("MiB", 1024**2), ("KiB", 1024)):
        if num_bytes >= size and num_bytes % size == 0:
            return f"{num_bytes // size}{unit}"
    return f"{num_bytes} bytes"
