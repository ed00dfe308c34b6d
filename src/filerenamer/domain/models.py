from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .doc_types import DocType

FALLBACK_CONFIDENCE = 0.1
FALLBACK_RATIONALE = "Failed to generate proposal, using original name"


@dataclass(frozen=True)
class FileDescriptor:
    file_id: str
    original_name: str
    mime_type: str
    size_bytes: int
    content_ref: bytes | str
    modified_at: datetime | None = None
    sort_index: int | None = None


@dataclass
class ExtractedSnippet:
    file_id: str
    text: str
    date_candidate: str | None = None
    image_bytes: bytes | None = field(default=None, repr=False)


@dataclass
class FilenameProposal:
    proposed_filename: str
    confidence: float
    doc_type: DocType
    date_iso: str | None
    primary_entity: str | None
    secondary_entity: str | None
    topic: str | None
    rationale: str

    def to_dict(self) -> dict[str, object]:
        return {
            "proposed_filename": self.proposed_filename,
            "confidence": self.confidence,
            "doctype": self.doc_type.value,
            "date_iso": self.date_iso,
            "primary_entity": self.primary_entity,
            "secondary_entity": self.secondary_entity,
            "topic": self.topic,
            "rationale": self.rationale,
        }


@dataclass
class ProposalRequest:
    file_id: str
    original_name: str
    mime_type: str
    snippet: str
    date_candidate: str | None = None
    image_bytes: bytes | None = None


@dataclass
class ProposalResult:
    file_id: str
    proposal: FilenameProposal
    built_filename: str
    final_name: str


@dataclass
class RenamePlanEntry:
    file_id: str
    proposal: FilenameProposal
    built_filename: str
    final_name: str
    included: bool = True
    edited: bool = False


@dataclass
class ExportArtifact:
    filename: str
    content: bytes
    media_type: str
