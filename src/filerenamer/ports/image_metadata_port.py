from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageMetadataPort(Protocol):
    def capture_date(self, image_bytes: bytes) -> str | None:
        """Return the capture date recorded in the image metadata, if any."""
