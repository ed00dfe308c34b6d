from .export_service import ExportService
from .extraction_service import ExtractionService
from .proposal_service import ProposalService
from .rename_plan_service import RenamePlanService

__all__ = [
    "ExportService",
    "ExtractionService",
    "ProposalService",
    "RenamePlanService",
]
