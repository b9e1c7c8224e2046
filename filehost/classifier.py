from __future__ import annotations

import logging
from typing import AbstractSet

import filetype

from .errors import UnsupportedMediaType
from .models import IMAGE_KINDS, MediaKind

log = logging.getLogger(__name__)

# Enough for signatures past offset 128 (DICOM puts "DICM" at 128..132).
DEFAULT_PEEK_BYTES = 262


class ContentClassifier:
    """
    Detects the real file kind from its leading bytes and enforces an allow-list.

    Detection relies on magic signatures only; the declared filename or
    Content-Type header is never consulted.
    """

    def __init__(self, allowed: AbstractSet[MediaKind] = IMAGE_KINDS, policy: str = "images") -> None:
        self.allowed = frozenset(allowed)
        self.policy = policy

    def classify(self, initial_bytes: bytes, max_peek: int = DEFAULT_PEEK_BYTES) -> MediaKind:
        header = bytes(initial_bytes[:max_peek])
        guessed = filetype.guess(header) if header else None
        if guessed is None:
            log.warning("Rejected upload: unrecognised signature")
            raise UnsupportedMediaType("unknown", policy=self.policy)

        try:
            kind = MediaKind(guessed.extension)
        except ValueError:
            kind = None
        if kind is None or kind not in self.allowed:
            log.warning("Rejected upload: %s is not allowed", guessed.mime)
            raise UnsupportedMediaType(guessed.mime, policy=self.policy)
        return kind
