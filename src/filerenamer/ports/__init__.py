from .byte_source_port import ByteSourcePort
from .image_metadata_port import ImageMetadataPort
from .llm_port import LLMPort
from .text_extractor_port import TextExtractorPort

__all__ = ["ByteSourcePort", "ImageMetadataPort", "LLMPort", "TextExtractorPort"]
