from __future__ import annotations

import logging

from filerenamer.domain.models import (
    ExtractedSnippet,
    FileDescriptor,
    ProposalRequest,
    RenamePlanEntry,
)
from filerenamer.domain.rename_plan import entries_from_results, merge_rerun, reserved_names
from filerenamer.errors import BatchProcessingError, InputValidationError
from filerenamer.services.extraction_service import ExtractionService
from filerenamer.services.proposal_service import ProposalService

logger = logging.getLogger(__name__)


class RenamePlanService:
    def __init__(
        self,
        extraction: ExtractionService,
        proposals: ProposalService,
    ) -> None:
        self._extraction = extraction
        self._proposals = proposals

    def generate(
        self, files: list[FileDescriptor], user_instructions: str | None = None
    ) -> tuple[list[RenamePlanEntry], list[ExtractedSnippet]]:
        ordered = self._ordered(files)
        try:
            snippets = self._extraction.extract_batch(ordered)
            proposal_requests = self._build_requests(ordered, snippets)
            results = self._proposals.propose_batch(proposal_requests, user_instructions)
        except InputValidationError:
            raise
        except Exception as exc:
            raise BatchProcessingError("Failed to generate filename proposals") from exc
        logger.info("Generated rename plan for %d files", len(results))
        return entries_from_results(results), snippets

    def rerun(
        self,
        plan: list[RenamePlanEntry],
        files: list[FileDescriptor],
        selected_ids: set[str],
        user_instructions: str | None = None,
    ) -> tuple[list[RenamePlanEntry], list[ExtractedSnippet]]:
        """
        Regenerate the selected entries and merge them into `plan`.

        Entries outside the selection are left untouched; the selection is
        resolved against the names those entries already hold.
        """
        targets = [file for file in self._ordered(files) if file.file_id in selected_ids]
        if not targets:
            raise InputValidationError("No files selected for re-run")
        original_names = {file.file_id: file.original_name for file in files}
        untouched = [entry for entry in plan if entry.file_id not in selected_ids]
        try:
            snippets = self._extraction.extract_batch(targets)
            proposal_requests = self._build_requests(targets, snippets)
            results = self._proposals.propose_batch(
                proposal_requests,
                user_instructions,
                seed_names=reserved_names(untouched, original_names),
                taken_names=[entry.final_name for entry in untouched],
            )
        except InputValidationError:
            raise
        except Exception as exc:
            raise BatchProcessingError("Failed to re-run filename proposals") from exc
        logger.info("Re-ran %d of %d plan entries", len(results), len(plan))
        return merge_rerun(plan, results), snippets

    def _build_requests(
        self, files: list[FileDescriptor], snippets: list[ExtractedSnippet]
    ) -> list[ProposalRequest]:
        by_id = {snippet.file_id: snippet for snippet in snippets}
        proposal_requests: list[ProposalRequest] = []
        for file in files:
            snippet = by_id.get(file.file_id)
            proposal_requests.append(
                ProposalRequest(
                    file_id=file.file_id,
                    original_name=file.original_name,
                    mime_type=file.mime_type,
                    snippet=snippet.text if snippet else "",
                    date_candidate=snippet.date_candidate if snippet else None,
                    image_bytes=snippet.image_bytes if snippet else None,
                )
            )
        return proposal_requests

    @staticmethod
    def _ordered(files: list[FileDescriptor]) -> list[FileDescriptor]:
        if not files:
            raise InputValidationError("No files provided")
        indexed = list(enumerate(files))
        indexed.sort(
            key=lambda pair: (
                pair[1].sort_index if pair[1].sort_index is not None else pair[0],
                pair[0],
            )
        )
        return [file for _, file in indexed]
