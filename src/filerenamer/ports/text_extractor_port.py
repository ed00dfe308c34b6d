from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextExtractorPort(Protocol):
    def extract_text(self, data: bytes) -> str:
        """Extract plain text from a document buffer."""
