from __future__ import annotations

from uuid import uuid4

import streamlit as st

from filerenamer.domain.models import FileDescriptor, RenamePlanEntry
from filerenamer.domain.rename_plan import edit_final_name, set_included

_UPLOAD_IDS_KEY = "upload_ids"


def _init_state() -> None:
    st.session_state.setdefault("services", None)
    st.session_state.setdefault("services_api_key", None)
    st.session_state.setdefault("files", [])
    st.session_state.setdefault("plan", [])
    st.session_state.setdefault("snippets", {})
    st.session_state.setdefault("error", None)
    st.session_state.setdefault("zip_artifact", None)
    st.session_state.setdefault("uploader_key", 0)
    st.session_state.setdefault("plan_version", 0)
    st.session_state.setdefault(_UPLOAD_IDS_KEY, {})


def _trigger_rerun() -> None:
    if hasattr(st, "rerun"):
        st.rerun()
    else:
        st.experimental_rerun()


def _clear_session() -> None:
    st.session_state["files"] = []
    st.session_state["plan"] = []
    st.session_state["snippets"] = {}
    st.session_state["error"] = None
    st.session_state["zip_artifact"] = None
    st.session_state[_UPLOAD_IDS_KEY] = {}
    st.session_state["uploader_key"] = st.session_state.get("uploader_key", 0) + 1
    st.session_state["plan_version"] = st.session_state.get("plan_version", 0) + 1


def _descriptors_from_uploads(uploads: list) -> list[FileDescriptor]:
    """
    Turn uploader entries into descriptors, keeping ids stable across reruns.

    The uploader hands back fresh objects on every script run, so ids are
    remembered per (name, size, occurrence) key in session state.
    """
    known_ids: dict[str, str] = st.session_state.setdefault(_UPLOAD_IDS_KEY, {})
    descriptors: list[FileDescriptor] = []
    seen: dict[str, int] = {}
    for index, upload in enumerate(uploads or []):
        base_key = f"{upload.name}:{upload.size}"
        seen[base_key] = seen.get(base_key, 0) + 1
        key = f"{base_key}:{seen[base_key]}"
        file_id = known_ids.get(key)
        if file_id is None:
            file_id = str(uuid4())
            known_ids[key] = file_id
        descriptors.append(
            FileDescriptor(
                file_id=file_id,
                original_name=upload.name,
                mime_type=upload.type or "",
                size_bytes=upload.size,
                content_ref=upload.getvalue(),
                sort_index=index,
            )
        )
    return descriptors


def plan_to_rows(plan: list[RenamePlanEntry], files: list[FileDescriptor]) -> list[dict]:
    names = {file.file_id: file.original_name for file in files}
    return [
        {
            "file_id": entry.file_id,
            "include": entry.included,
            "original_name": names.get(entry.file_id, ""),
            "new_name": entry.final_name,
            "confidence": round(entry.proposal.confidence, 2),
            "doctype": entry.proposal.doc_type.value,
            "rationale": entry.proposal.rationale,
            "edited": entry.edited,
        }
        for entry in plan
    ]


def apply_row_edits(plan: list[RenamePlanEntry], rows: object) -> list[RenamePlanEntry]:
    """Fold edits from the review table back into the plan."""

    if hasattr(rows, "to_dict"):
        rows = rows.to_dict("records")
    by_id = {entry.file_id: entry for entry in plan}
    updated = plan
    for row in rows or []:
        entry = by_id.get(str(row.get("file_id", "")))
        if entry is None:
            continue
        include = bool(row.get("include", entry.included))
        if include != entry.included:
            updated = set_included(updated, entry.file_id, include)
        new_name = str(row.get("new_name") or "").strip()
        if new_name and new_name != entry.final_name:
            updated = edit_final_name(updated, entry.file_id, new_name)
    return updated


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"
