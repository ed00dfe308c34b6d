from __future__ import annotations

from filerenamer.ports.llm_port import LLMPort


class MockLLMAdapter(LLMPort):
    """Stand-in used when no model is configured; every call degrades to the fallback."""

    def generate_text(self, system_prompt: str, user_prompt: str) -> str:
        _ = system_prompt
        _ = user_prompt
        return ""

    def describe_image(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        _ = image_bytes
        _ = mime_type
        _ = instruction
        return ""
