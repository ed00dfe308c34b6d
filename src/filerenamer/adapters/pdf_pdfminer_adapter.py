from __future__ import annotations

import io

from pdfminer.high_level import extract_text

from filerenamer.ports.text_extractor_port import TextExtractorPort


class PdfMinerTextAdapter(TextExtractorPort):
    def __init__(self, max_pages: int = 0) -> None:
        self._max_pages = max_pages

    def extract_text(self, data: bytes) -> str:
        try:
            return extract_text(io.BytesIO(data), maxpages=self._max_pages) or ""
        except Exception as exc:
            raise RuntimeError("Failed to extract text from PDF bytes.") from exc
