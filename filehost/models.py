from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional


class TypeCode(enum.IntEnum):
    IMAGE = 0
    VIDEO = 1
    OTHER = 2


class MediaKind(str, enum.Enum):
    """Concrete file kinds the service knows how to name, keyed by extension."""

    PNG = "png"
    APNG = "apng"
    JPEG = "jpg"
    JPEG2000 = "jpx"
    JPEG_XL = "jxl"
    GIF = "gif"
    WEBP = "webp"
    BMP = "bmp"
    TIFF = "tif"
    ICO = "ico"
    HEIC = "heic"
    AVIF = "avif"
    PSD = "psd"
    XCF = "xcf"
    CR2 = "cr2"
    JXR = "jxr"
    DWG = "dwg"
    DICOM = "dcm"
    QOI = "qoi"
    MP4 = "mp4"
    WEBM = "webm"
    MOV = "mov"
    MKV = "mkv"
    AVI = "avi"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime(self) -> str:
        return _MIME_TYPES[self]

    @property
    def type_code(self) -> TypeCode:
        if self in IMAGE_KINDS:
            return TypeCode.IMAGE
        if self in VIDEO_KINDS:
            return TypeCode.VIDEO
        return TypeCode.OTHER

    @classmethod
    def from_file_name(cls, file_name: str) -> Optional["MediaKind"]:
        _, _, ext = file_name.rpartition(".")
        try:
            return cls(ext.lower())
        except ValueError:
            return None


_MIME_TYPES: Dict[MediaKind, str] = {
    MediaKind.PNG: "image/png",
    MediaKind.APNG: "image/apng",
    MediaKind.JPEG: "image/jpeg",
    MediaKind.JPEG2000: "image/jpx",
    MediaKind.JPEG_XL: "image/jxl",
    MediaKind.GIF: "image/gif",
    MediaKind.WEBP: "image/webp",
    MediaKind.BMP: "image/bmp",
    MediaKind.TIFF: "image/tiff",
    MediaKind.ICO: "image/x-icon",
    MediaKind.HEIC: "image/heic",
    MediaKind.AVIF: "image/avif",
    MediaKind.PSD: "image/vnd.adobe.photoshop",
    MediaKind.XCF: "image/x-xcf",
    MediaKind.CR2: "image/x-canon-cr2",
    MediaKind.JXR: "image/vnd.ms-photo",
    MediaKind.DWG: "image/vnd.dwg",
    MediaKind.DICOM: "application/dicom",
    MediaKind.QOI: "image/qoi",
    MediaKind.MP4: "video/mp4",
    MediaKind.WEBM: "video/webm",
    MediaKind.MOV: "video/quicktime",
    MediaKind.MKV: "video/x-matroska",
    MediaKind.AVI: "video/x-msvideo",
}

# DICOM carries an application/ mime type but is medical imaging.
IMAGE_KINDS = frozenset(kind for kind, mime in _MIME_TYPES.items() if mime.startswith("image/")) | {MediaKind.DICOM}
VIDEO_KINDS = frozenset(kind for kind, mime in _MIME_TYPES.items() if mime.startswith("video/"))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class ApiKey:
    id: int
    owner_label: str
    secret_value: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return as_utc(now) >= as_utc(self.expires_at)


@dataclass(frozen=True)
class ValidatedIdentity:
    key_id: int
    owner_label: str


@dataclass
class FileRecord:
    id: str
    file_name: str
    content_hash: str
    type_code: TypeCode
    size_bytes: int
    owner_key: int
    display_name: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def extension(self) -> str:
        return self.file_name.rpartition(".")[2]

    @property
    def media_kind(self) -> Optional[MediaKind]:
        return MediaKind.from_file_name(self.file_name)
