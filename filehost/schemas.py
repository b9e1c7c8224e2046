from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class FileUpload(BaseModel):
    id: str
    ext: str
    url: Optional[str] = None


class HealthStatus(BaseModel):
    status: str
    service: str
    version: str
