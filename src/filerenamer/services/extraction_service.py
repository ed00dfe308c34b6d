from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from filerenamer.domain.media_types import MediaCategory, classify_media_type
from filerenamer.domain.models import ExtractedSnippet, FileDescriptor
from filerenamer.domain.rename_logic import truncate_chars
from filerenamer.errors import InputValidationError
from filerenamer.ports.byte_source_port import ByteSourcePort
from filerenamer.ports.image_metadata_port import ImageMetadataPort
from filerenamer.ports.text_extractor_port import TextExtractorPort
from filerenamer.services.time_utils import local_date_yyyy_mm_dd

logger = logging.getLogger(__name__)

MAX_SNIPPET_CHARS = 3000


class ExtractionService:
    def __init__(
        self,
        pdf_extractor: TextExtractorPort,
        docx_extractor: TextExtractorPort,
        byte_source: ByteSourcePort,
        image_metadata: ImageMetadataPort | None = None,
        workers: int = 1,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._docx_extractor = docx_extractor
        self._byte_source = byte_source
        self._image_metadata = image_metadata
        self._workers = workers
        self._handlers: dict[MediaCategory, Callable[[bytes, str, str], str]] = {
            MediaCategory.PDF: self._extract_pdf,
            MediaCategory.WORD: self._extract_docx,
            MediaCategory.TEXT: self._extract_plain_text,
            MediaCategory.IMAGE: self._describe_image,
            MediaCategory.AUDIO: self._describe_audio,
            MediaCategory.OTHER: self._describe_other,
        }
        missing = set(MediaCategory) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No extraction handler for: {sorted(m.value for m in missing)}")

    def extract(self, data: bytes, declared_mime_type: str, file_name: str) -> str:
        """Return a bounded text snippet for one file buffer."""

        category = classify_media_type(declared_mime_type, file_name, data)
        handler = self._handlers[category]
        snippet = handler(data, declared_mime_type, file_name)
        return truncate_chars(snippet, MAX_SNIPPET_CHARS)

    def extract_file(self, file: FileDescriptor) -> ExtractedSnippet:
        try:
            data = self._byte_source.fetch_bytes(file.content_ref)
            text = self.extract(data, file.mime_type, file.original_name)
            date_candidate = self._date_candidate(file, data)
            is_image = (
                classify_media_type(file.mime_type, file.original_name, data)
                == MediaCategory.IMAGE
            )
        except Exception:
            logger.exception(
                "Extraction failed for file %s (%s)", file.file_id, file.original_name
            )
            return ExtractedSnippet(
                file_id=file.file_id,
                text=f"[Error processing file: {file.original_name}]",
                date_candidate=None,
            )
        logger.debug(
            "Extracted %d chars from %s (%s)", len(text), file.original_name, file.file_id
        )
        return ExtractedSnippet(
            file_id=file.file_id,
            text=text,
            date_candidate=date_candidate,
            image_bytes=data if is_image else None,
        )

    def extract_batch(self, files: list[FileDescriptor]) -> list[ExtractedSnippet]:
        if not files:
            raise InputValidationError("No files provided")
        for file in files:
            if not file.file_id or not file.original_name:
                raise InputValidationError("Each file needs an id and a name")
        if self._workers <= 1 or len(files) <= 1:
            return [self.extract_file(file) for file in files]
        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            return list(executor.map(self.extract_file, files))

    def _date_candidate(self, file: FileDescriptor, data: bytes) -> str | None:
        category = classify_media_type(file.mime_type, file.original_name, data)
        if category == MediaCategory.IMAGE and self._image_metadata is not None:
            captured = self._image_metadata.capture_date(data)
            if captured:
                return captured
        if file.modified_at is not None:
            return local_date_yyyy_mm_dd(file.modified_at)
        return None

    def _extract_pdf(self, data: bytes, mime_type: str, file_name: str) -> str:
        return self._run_strategy(self._pdf_extractor.extract_text, data, file_name)

    def _extract_docx(self, data: bytes, mime_type: str, file_name: str) -> str:
        return self._run_strategy(self._docx_extractor.extract_text, data, file_name)

    def _extract_plain_text(self, data: bytes, mime_type: str, file_name: str) -> str:
        return self._run_strategy(_decode_utf8, data, file_name)

    @staticmethod
    def _describe_image(data: bytes, mime_type: str, file_name: str) -> str:
        return f"[Image file: {file_name}, type: {mime_type}]"

    @staticmethod
    def _describe_audio(data: bytes, mime_type: str, file_name: str) -> str:
        return f"[Audio file: {file_name}, type: {mime_type}]"

    @staticmethod
    def _describe_other(data: bytes, mime_type: str, file_name: str) -> str:
        return f"[File: {file_name}, type: {mime_type}, size: {len(data)} bytes]"

    @staticmethod
    def _run_strategy(strategy: Callable[[bytes], str], data: bytes, file_name: str) -> str:
        try:
            return strategy(data) or ""
        except Exception as exc:
            logger.warning("Text extraction failed for %s: %s", file_name, exc)
            return ""


def _decode_utf8(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")
