from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ByteSourcePort(Protocol):
    def fetch_bytes(self, content_ref: bytes | str) -> bytes:
        """Resolve a content reference (buffer or fetchable location) to bytes."""
