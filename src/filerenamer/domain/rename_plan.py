from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from .models import ProposalResult, RenamePlanEntry
from .rename_logic import get_extension

LOW_CONFIDENCE_THRESHOLD = 0.5


@dataclass
class PlanSummary:
    total: int
    included: int
    edited: int
    low_confidence: int


def entries_from_results(results: Iterable[ProposalResult]) -> list[RenamePlanEntry]:
    return [
        RenamePlanEntry(
            file_id=result.file_id,
            proposal=result.proposal,
            built_filename=result.built_filename,
            final_name=result.final_name,
        )
        for result in results
    ]


def merge_rerun(
    plan: list[RenamePlanEntry], results: Iterable[ProposalResult]
) -> list[RenamePlanEntry]:
    """
    Replace the proposal and names of re-run entries, keeping plan order.

    Re-run entries keep their `included` flag and lose their `edited` flag;
    entries without a result are returned unchanged.
    """
    by_id = {result.file_id: result for result in results}
    merged: list[RenamePlanEntry] = []
    for entry in plan:
        result = by_id.get(entry.file_id)
        if result is None:
            merged.append(entry)
            continue
        merged.append(
            replace(
                entry,
                proposal=result.proposal,
                built_filename=result.built_filename,
                final_name=result.final_name,
                edited=False,
            )
        )
    return merged


def reserved_names(plan: Iterable[RenamePlanEntry], original_names: dict[str, str]) -> list[str]:
    """
    Names held by entries, expressed as duplicate-resolver keys.

    An unedited entry holds its built name plus the original extension,
    which is the key it was counted under; an edited entry holds the name
    the user typed.
    """
    names: list[str] = []
    for entry in plan:
        if entry.edited:
            names.append(entry.final_name)
            continue
        ext = get_extension(original_names.get(entry.file_id, ""))
        names.append(f"{entry.built_filename}{ext}")
    return names


def edit_final_name(plan: list[RenamePlanEntry], file_id: str, new_name: str) -> list[RenamePlanEntry]:
    return [
        replace(entry, final_name=new_name, edited=True) if entry.file_id == file_id else entry
        for entry in plan
    ]


def set_included(plan: list[RenamePlanEntry], file_id: str, included: bool) -> list[RenamePlanEntry]:
    return [
        replace(entry, included=included) if entry.file_id == file_id else entry
        for entry in plan
    ]


def toggle_all(plan: list[RenamePlanEntry]) -> list[RenamePlanEntry]:
    """Select every entry, or clear the selection when all are already selected."""

    all_selected = all(entry.included for entry in plan)
    return [replace(entry, included=not all_selected) for entry in plan]


def summarize_plan(plan: Iterable[RenamePlanEntry]) -> PlanSummary:
    entries = list(plan)
    return PlanSummary(
        total=len(entries),
        included=sum(1 for entry in entries if entry.included),
        edited=sum(1 for entry in entries if entry.edited),
        low_confidence=sum(
            1 for entry in entries if entry.proposal.confidence < LOW_CONFIDENCE_THRESHOLD
        ),
    )
