from __future__ import annotations

import pytest
from filetype.match import image_matchers

from conftest import FLAC_HEADER, GIF_HEADER, JPEG_HEADER, PNG_SIGNATURE, png_bytes
from filehost.classifier import ContentClassifier
from filehost.errors import UnsupportedMediaType
from filehost.models import IMAGE_KINDS, MediaKind, TypeCode


def test_png_signature_detected() -> None:
    kind = ContentClassifier().classify(png_bytes())
    assert kind is MediaKind.PNG
    assert kind.extension == "png"
    assert kind.mime == "image/png"
    assert kind.type_code is TypeCode.IMAGE


def test_jpeg_uses_jpg_extension() -> None:
    kind = ContentClassifier().classify(JPEG_HEADER + b"\x00" * 32)
    assert kind is MediaKind.JPEG
    assert kind.extension == "jpg"


def test_plain_text_rejected_as_unknown() -> None:
    with pytest.raises(UnsupportedMediaType) as excinfo:
        ContentClassifier().classify(b"just some words, definitely not an image")
    assert excinfo.value.kind == "unknown"
    assert excinfo.value.status_code == 400
    assert "only accepts images" in excinfo.value.detail


def test_audio_rejected_with_detected_type() -> None:
    with pytest.raises(UnsupportedMediaType) as excinfo:
        ContentClassifier().classify(FLAC_HEADER + b"\x00" * 64)
    assert excinfo.value.kind.startswith("audio/")
    assert excinfo.value.kind in excinfo.value.detail


def test_empty_payload_rejected() -> None:
    with pytest.raises(UnsupportedMediaType):
        ContentClassifier().classify(b"")


def test_only_the_peek_window_is_inspected() -> None:
    assert ContentClassifier().classify(PNG_SIGNATURE, max_peek=4) is MediaKind.PNG
    with pytest.raises(UnsupportedMediaType):
        ContentClassifier().classify(PNG_SIGNATURE, max_peek=2)


def test_allow_list_can_be_narrowed() -> None:
    classifier = ContentClassifier(allowed={MediaKind.PNG})
    assert classifier.classify(png_bytes()) is MediaKind.PNG
    with pytest.raises(UnsupportedMediaType) as excinfo:
        classifier.classify(GIF_HEADER + b"\x00" * 16)
    assert excinfo.value.kind == "image/gif"


def test_media_kind_from_file_name() -> None:
    assert MediaKind.from_file_name("abc123.png") is MediaKind.PNG
    assert MediaKind.from_file_name("abc123.JPG") is MediaKind.JPEG
    assert MediaKind.from_file_name("abc123.txt") is None


@pytest.mark.parametrize("matcher", image_matchers, ids=lambda m: m.extension)
def test_every_detectable_image_kind_is_allowed(matcher) -> None:
    kind = MediaKind(matcher.extension)
    assert kind in IMAGE_KINDS
    assert kind.type_code is TypeCode.IMAGE


def test_dicom_detected_past_offset_128() -> None:
    header = b"\x00" * 128 + b"DICM" + b"\x00" * 16
    kind = ContentClassifier().classify(header)
    assert kind is MediaKind.DICOM
    assert kind.mime == "application/dicom"
