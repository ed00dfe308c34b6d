from filerenamer.ports.byte_source_port import ByteSourcePort
from filerenamer.ports.image_metadata_port import ImageMetadataPort
from filerenamer.ports.llm_port import LLMPort
from filerenamer.ports.text_extractor_port import TextExtractorPort


class DummyLLM:
    def generate_text(self, system_prompt: str, user_prompt: str) -> str:
        return ""

    def describe_image(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        return ""


class DummyExtractor:
    def extract_text(self, data: bytes) -> str:
        return ""


class DummySource:
    def fetch_bytes(self, content_ref: bytes | str) -> bytes:
        return b""


class DummyMetadata:
    def capture_date(self, image_bytes: bytes) -> str | None:
        return None


def test_ports_runtime_checkable() -> None:
    assert isinstance(DummyLLM(), LLMPort)
    assert isinstance(DummyExtractor(), TextExtractorPort)
    assert isinstance(DummySource(), ByteSourcePort)
    assert isinstance(DummyMetadata(), ImageMetadataPort)


def test_llm_port_rejects_incomplete_adapter() -> None:
    assert not isinstance(DummyExtractor(), LLMPort)
