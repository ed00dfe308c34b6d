from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMPort(Protocol):
    def generate_text(self, system_prompt: str, user_prompt: str) -> str:
        """Return the model's raw text reply, or an empty string on failure."""

    def describe_image(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        """Return a text description of the image, or an empty string on failure."""
