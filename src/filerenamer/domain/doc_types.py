from __future__ import annotations

from enum import Enum


class DocType(str, Enum):
    """Closed set of document categories a proposal can be classified as."""

    INVOICE = "invoice"
    RECEIPT = "receipt"
    CONTRACT = "contract"
    MEETING_NOTES = "meeting-notes"
    RESUME = "resume"
    PHOTO = "photo"
    SCREENSHOT = "screenshot"
    SLIDE = "slide"
    REPORT = "report"
    PAPER = "paper"
    ARTICLE = "article"
    CODE = "code"
    AUDIO_NOTES = "audio-notes"
    OTHER = "other"


DOC_TYPE_VALUES: tuple[str, ...] = tuple(doc_type.value for doc_type in DocType)


def parse_doc_type(value: str) -> DocType:
    """Parse a doc type string into a DocType enum (case-insensitive)."""

    normalized = value.strip().lower()
    for doc_type in DocType:
        if doc_type.value == normalized:
            return doc_type
    raise ValueError(f"Unsupported doc type: {value}")
