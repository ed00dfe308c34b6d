from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from filerenamer.domain.doc_types import DOC_TYPE_VALUES
from filerenamer.domain.media_types import MediaCategory, classify_media_type
from filerenamer.domain.models import FilenameProposal, ProposalRequest, ProposalResult
from filerenamer.domain.proposal_validation import fallback_proposal, parse_proposal
from filerenamer.domain.rename_logic import (
    DuplicateCandidate,
    build_filename,
    ensure_stem,
    get_extension,
    resolve_duplicates,
    truncate_to_tokens,
)
from filerenamer.errors import InputValidationError
from filerenamer.ports.llm_port import LLMPort

logger = logging.getLogger(__name__)

PROMPT_SNIPPET_TOKENS = 500
IMAGE_CAPTION_FAILED = "Image content could not be analyzed"

_DOC_TYPE_LIST = ",".join(f'"{value}"' for value in DOC_TYPE_VALUES)

SYSTEM_PROMPT = (
    "You are a filename generator. Analyze the provided content and metadata "
    "to create an accurate, descriptive filename.\n\n"
    "Output STRICT JSON only matching this schema:\n"
    "{\n"
    '  "proposed_filename": string (no extension, at least 3 characters),\n'
    '  "confidence": number 0..1,\n'
    f'  "doctype": one of [{_DOC_TYPE_LIST}],\n'
    '  "date_iso": "YYYY-MM-DD" or null,\n'
    '  "primary_entity": string or null,\n'
    '  "secondary_entity": string or null,\n'
    '  "topic": string or null,\n'
    '  "rationale": string (at most 2 sentences, under 280 characters)\n'
    "}\n\n"
    "Filenames must not contain slashes, colons or other path-unsafe characters.\n"
    "Dates: only set date_iso when a date appears in the provided content. "
    "Metadata date candidates are hints, not evidence. If the content shows no "
    "date, date_iso MUST be null. Never guess a year or use a placeholder date.\n\n"
    "If user provides specific instructions, follow them exactly - they override "
    "default policies."
)

RENAMING_POLICY = (
    "Naming convention:\n"
    "- Use lowercase kebab-case\n"
    "- Include relevant components: doctype, entities, topic, date (if found in the content)\n"
    "- Keep under 120 characters\n"
    "- Use YYYY-MM-DD format for dates unless user specifies otherwise"
)

IMAGE_CAPTION_INSTRUCTION = (
    "Describe this image in detail. Include: the type of document or image, any "
    "visible dates written exactly as they appear, key visible text, names and "
    "entities, and the main subject or topic. If no date is visible, say so."
)


class ProposalService:
    def __init__(self, llm: LLMPort, workers: int = 1) -> None:
        self._llm = llm
        self._workers = workers

    def propose(
        self,
        original_name: str,
        mime_type: str,
        snippet: str,
        date_candidates: list[str] | None = None,
        user_instructions: str | None = None,
    ) -> FilenameProposal:
        """Ask the model for a filename proposal; never raises."""

        truncated = truncate_to_tokens(snippet or "", PROMPT_SNIPPET_TOKENS)
        user_prompt = self._build_user_prompt(
            original_name, mime_type, truncated, date_candidates, user_instructions
        )
        logger.debug("Content snippet for %s: %s", original_name, truncated[:200])
        try:
            raw = self._llm.generate_text(SYSTEM_PROMPT, user_prompt)
        except Exception:
            logger.exception("Proposal call failed for %s", original_name)
            return fallback_proposal(original_name)
        result = parse_proposal(raw, truncated)
        if not result.ok:
            logger.warning("Proposal rejected for %s: %s", original_name, result.reason)
            return fallback_proposal(original_name)
        logger.info(
            "Proposed filename for %s: %s (date: %s)",
            original_name,
            result.proposal.proposed_filename,
            result.proposal.date_iso,
        )
        return result.proposal

    def caption_image(self, image_bytes: bytes, mime_type: str) -> str:
        try:
            caption = self._llm.describe_image(image_bytes, mime_type, IMAGE_CAPTION_INSTRUCTION)
        except Exception:
            logger.exception("Image caption call failed")
            return IMAGE_CAPTION_FAILED
        if not caption or not caption.strip():
            return IMAGE_CAPTION_FAILED
        return caption.strip()

    def propose_item(
        self, item: ProposalRequest, user_instructions: str | None = None
    ) -> FilenameProposal:
        snippet = item.snippet
        category = classify_media_type(item.mime_type, item.original_name)
        if category == MediaCategory.IMAGE and item.image_bytes:
            snippet = self.caption_image(item.image_bytes, item.mime_type)
            logger.debug("Vision caption for %s: %s", item.original_name, snippet[:200])
        return self.propose(
            item.original_name,
            item.mime_type,
            snippet,
            date_candidates=[item.date_candidate] if item.date_candidate else None,
            user_instructions=user_instructions,
        )

    def propose_batch(
        self,
        items: list[ProposalRequest],
        user_instructions: str | None = None,
        seed_names: list[str] | None = None,
        taken_names: list[str] | None = None,
    ) -> list[ProposalResult]:
        """
        Propose names for every item and resolve duplicates across the batch.

        Results come back in submission order whatever order the calls
        finish in, so the first submitted duplicate keeps the plain name.
        """
        if not items:
            raise InputValidationError("No items provided")
        for item in items:
            if not item.file_id or not item.original_name:
                raise InputValidationError("Each item needs an id and an original name")
        instructions = (user_instructions or "").strip() or None
        proposals = self._run_all(items, instructions)

        built: list[tuple[ProposalRequest, FilenameProposal, str, str]] = []
        for item, proposal in zip(items, proposals):
            filename = ensure_stem(build_filename(proposal), item.original_name)
            built.append((item, proposal, filename, get_extension(item.original_name)))
        final_names = resolve_duplicates(
            [DuplicateCandidate(item.file_id, filename, ext) for item, _, filename, ext in built],
            seed_names=seed_names or (),
            taken_names=taken_names or (),
        )
        return [
            ProposalResult(
                file_id=item.file_id,
                proposal=proposal,
                built_filename=filename,
                final_name=final_names.get(item.file_id, f"{filename}{ext}"),
            )
            for item, proposal, filename, ext in built
        ]

    def _run_all(
        self, items: list[ProposalRequest], user_instructions: str | None
    ) -> list[FilenameProposal]:
        if self._workers <= 1 or len(items) <= 1:
            return [self.propose_item(item, user_instructions) for item in items]
        proposals: dict[int, FilenameProposal] = {}
        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            future_map = {
                executor.submit(self.propose_item, item, user_instructions): index
                for index, item in enumerate(items)
            }
            for future in as_completed(future_map):
                index = future_map[future]
                try:
                    proposals[index] = future.result()
                except Exception:
                    item = items[index]
                    logger.exception("Proposal failed for file %s", item.file_id)
                    proposals[index] = fallback_proposal(item.original_name)
        return [proposals[index] for index in range(len(items))]

    @staticmethod
    def _build_user_prompt(
        original_name: str,
        mime_type: str,
        snippet: str,
        date_candidates: list[str] | None,
        user_instructions: str | None,
    ) -> str:
        prompt = ""
        if user_instructions:
            prompt += (
                "User Instructions:\n"
                f"{user_instructions}\n\n"
                "Note: these instructions override the default naming policy. Put the "
                'complete filename in "proposed_filename", following the user '
                "instructions above.\n\n"
            )
        candidates = ", ".join(date_candidates) if date_candidates else "none"
        prompt += (
            f'Original filename: "{original_name}"\n'
            f"MIME: {mime_type}\n\n"
            "Content/Description:\n"
            '"""\n'
            f"{snippet}\n"
            '"""\n\n'
            f"Metadata date candidates (hints only): {candidates}\n\n"
            f"{RENAMING_POLICY}\n\n"
            "Return JSON only."
        )
        return prompt
