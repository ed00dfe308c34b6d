from __future__ import annotations

from typing import Any

from filerenamer.adapters.byte_source_adapter import HttpByteSourceAdapter
from filerenamer.adapters.docx_adapter import DocxTextAdapter
from filerenamer.adapters.exif_pillow_adapter import PillowExifAdapter
from filerenamer.adapters.llm_mock import MockLLMAdapter
from filerenamer.adapters.llm_openai import OpenAILLMAdapter
from filerenamer.adapters.pdf_pdfminer_adapter import PdfMinerTextAdapter
from filerenamer.settings import (
    FETCH_TIMEOUT_SECONDS,
    LLM_MAX_OUTPUT_TOKENS,
    LLM_PROVIDER,
    LLM_TIMEOUT_SECONDS,
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    OPENAI_VISION_MODEL,
    PROPOSAL_WORKERS,
)
from filerenamer.services.export_service import ExportService
from filerenamer.services.extraction_service import ExtractionService
from filerenamer.services.proposal_service import ProposalService
from filerenamer.services.rename_plan_service import RenamePlanService


def build_services(api_key: str | None = None) -> dict[str, Any]:
    key = OPENAI_API_KEY if api_key is None else api_key
    byte_source = HttpByteSourceAdapter(timeout=FETCH_TIMEOUT_SECONDS)
    llm = MockLLMAdapter()
    if LLM_PROVIDER.lower() == "openai" and key:
        llm = OpenAILLMAdapter(
            api_key=key,
            model=OPENAI_MODEL,
            vision_model=OPENAI_VISION_MODEL,
            base_url=OPENAI_BASE_URL,
            timeout=LLM_TIMEOUT_SECONDS,
            max_output_tokens=LLM_MAX_OUTPUT_TOKENS,
        )
    extraction_service = ExtractionService(
        pdf_extractor=PdfMinerTextAdapter(),
        docx_extractor=DocxTextAdapter(),
        byte_source=byte_source,
        image_metadata=PillowExifAdapter(),
        workers=PROPOSAL_WORKERS,
    )
    proposal_service = ProposalService(llm, workers=PROPOSAL_WORKERS)
    return {
        "extraction_service": extraction_service,
        "proposal_service": proposal_service,
        "rename_plan_service": RenamePlanService(extraction_service, proposal_service),
        "export_service": ExportService(byte_source),
        "byte_source": byte_source,
        "llm": llm,
    }
