from .doc_types import DocType
from .models import (
    ExtractedSnippet,
    FileDescriptor,
    FilenameProposal,
    ProposalResult,
    RenamePlanEntry,
)
from .rename_logic import build_filename, resolve_duplicates, sanitize_filename

__all__ = [
    "DocType",
    "ExtractedSnippet",
    "FileDescriptor",
    "FilenameProposal",
    "ProposalResult",
    "RenamePlanEntry",
    "build_filename",
    "resolve_duplicates",
    "sanitize_filename",
]
