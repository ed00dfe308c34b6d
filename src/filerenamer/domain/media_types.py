from __future__ import annotations

import mimetypes
from enum import Enum

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME_TYPE = "application/msword"
PDF_MIME_TYPE = "application/pdf"
_UNTRUSTED_MIME_TYPES = {"", "application/octet-stream"}


class MediaCategory(str, Enum):
    PDF = "pdf"
    WORD = "word"
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    OTHER = "other"


def effective_mime_type(declared_mime_type: str, file_name: str) -> str:
    """
    Return the declared media type, or a guess from the filename when the
    declared value carries no information.

    Examples:
        >>> effective_mime_type("", "notes.txt")
        'text/plain'
        >>> effective_mime_type("image/png", "notes.txt")
        'image/png'
    """
    declared = (declared_mime_type or "").strip().lower()
    if declared not in _UNTRUSTED_MIME_TYPES:
        return declared
    guessed, _ = mimetypes.guess_type(file_name or "")
    return guessed or declared


def classify_media_type(declared_mime_type: str, file_name: str = "", data: bytes = b"") -> MediaCategory:
    mime_type = effective_mime_type(declared_mime_type, file_name)
    if mime_type == PDF_MIME_TYPE:
        return MediaCategory.PDF
    if mime_type in {DOCX_MIME_TYPE, DOC_MIME_TYPE}:
        return MediaCategory.WORD
    if mime_type.startswith("text/"):
        return MediaCategory.TEXT
    if mime_type.startswith("image/"):
        return MediaCategory.IMAGE
    if mime_type.startswith("audio/"):
        return MediaCategory.AUDIO
    if mime_type in _UNTRUSTED_MIME_TYPES and _is_pdf_bytes(data):
        return MediaCategory.PDF
    return MediaCategory.OTHER


def _is_pdf_bytes(data: bytes) -> bool:
    return bool(data) and data.lstrip().startswith(b"%PDF")
