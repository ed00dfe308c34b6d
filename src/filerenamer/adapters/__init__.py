from .byte_source_adapter import HttpByteSourceAdapter
from .llm_mock import MockLLMAdapter
from .llm_openai import OpenAILLMAdapter

__all__ = ["HttpByteSourceAdapter", "MockLLMAdapter", "OpenAILLMAdapter"]
