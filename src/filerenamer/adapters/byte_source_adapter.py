from __future__ import annotations

import requests

from filerenamer.ports.byte_source_port import ByteSourcePort


class HttpByteSourceAdapter(ByteSourcePort):
    """Resolve in-memory buffers directly and fetch staged uploads over HTTP."""

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    def fetch_bytes(self, content_ref: bytes | str) -> bytes:
        if isinstance(content_ref, (bytes, bytearray, memoryview)):
            return bytes(content_ref)
        if not isinstance(content_ref, str) or not content_ref.startswith(("http://", "https://")):
            raise RuntimeError(f"Unsupported content reference: {content_ref!r}")
        try:
            response = requests.get(content_ref, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise RuntimeError(f"Failed to fetch content from {content_ref}") from exc
        return response.content
