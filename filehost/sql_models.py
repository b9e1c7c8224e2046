from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class ApiKeyModel(Base):
    __tablename__ = "apikeys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key_owner: Mapped[str] = mapped_column(String(255), nullable=False)
    apikey: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class FileModel(Base):
    __tablename__ = "files"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    file_name: Mapped[str] = mapped_column(String(64), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    # Unique index is what settles concurrent uploads of identical bytes.
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    file_type: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    uploader: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    upload_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
