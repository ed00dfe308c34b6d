from __future__ import annotations

import logging
import sys
from pathlib import Path

import streamlit as st

_SRC_ROOT = Path(__file__).resolve().parents[2]
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))

from filerenamer.container import build_services
from filerenamer.domain.rename_logic import estimate_tokens
from filerenamer.domain.rename_plan import summarize_plan, toggle_all
from filerenamer.errors import InputValidationError
from filerenamer.logging_config import configure_logging
from filerenamer.settings import OPENAI_API_KEY
from filerenamer.ui_streamlit.helpers import (
    _clear_session,
    _descriptors_from_uploads,
    _init_state,
    _trigger_rerun,
    apply_row_edits,
    format_file_size,
    plan_to_rows,
)

logger = logging.getLogger(__name__)


def _get_services(api_key: str):
    if (
        st.session_state["services"] is None
        or st.session_state.get("services_api_key") != api_key
    ):
        st.session_state["services"] = build_services(api_key)
        st.session_state["services_api_key"] = api_key
    return st.session_state["services"]


def _store_snippets(snippets: list) -> None:
    stored = dict(st.session_state.get("snippets", {}))
    for snippet in snippets:
        stored[snippet.file_id] = snippet.text
    st.session_state["snippets"] = stored


def _render_review_table() -> None:
    plan = st.session_state.get("plan", [])
    files = st.session_state.get("files", [])
    if not plan:
        return
    st.subheader("Review")
    summary = summarize_plan(plan)
    token_total = sum(estimate_tokens(text) for text in st.session_state["snippets"].values())
    st.caption(
        f"{summary.included}/{summary.total} selected, {summary.edited} edited, "
        f"{summary.low_confidence} low confidence, ~{token_total} input tokens"
    )
    edited_rows = st.data_editor(
        plan_to_rows(plan, files),
        key=f"review_table_{st.session_state['plan_version']}",
        hide_index=True,
        use_container_width=True,
        disabled=["file_id", "original_name", "confidence", "doctype", "rationale", "edited"],
        column_config={
            "file_id": None,
            "include": st.column_config.CheckboxColumn("Include"),
            "original_name": "Original Name",
            "new_name": st.column_config.TextColumn("New Name", required=True),
            "confidence": st.column_config.NumberColumn("Confidence", format="%.2f"),
            "doctype": "Type",
            "rationale": "Rationale",
            "edited": st.column_config.CheckboxColumn("Edited"),
        },
    )
    updated = apply_row_edits(plan, edited_rows)
    if updated != plan:
        st.session_state["plan"] = updated
        st.session_state["zip_artifact"] = None
        _trigger_rerun()


def _render_downloads(services) -> None:
    plan = st.session_state.get("plan", [])
    files = st.session_state.get("files", [])
    if not plan or not any(entry.included for entry in plan):
        return
    cols = st.columns(2)
    try:
        csv_artifact = services["export_service"].export_csv(plan, files)
        cols[0].download_button(
            "Export CSV",
            data=csv_artifact.content,
            file_name=csv_artifact.filename,
            mime=csv_artifact.media_type,
        )
    except InputValidationError as exc:
        cols[0].warning(str(exc))
    if cols[1].button("Prepare ZIP"):
        try:
            st.session_state["zip_artifact"] = services["export_service"].build_zip(plan, files)
        except Exception as exc:
            logger.exception("ZIP export failed")
            st.session_state["error"] = f"Failed to generate ZIP file: {exc}"
    zip_artifact = st.session_state.get("zip_artifact")
    if zip_artifact is not None:
        cols[1].download_button(
            "Download ZIP",
            data=zip_artifact.content,
            file_name=zip_artifact.filename,
            mime=zip_artifact.media_type,
        )


def main() -> None:
    configure_logging()
    st.title("AI File Renamer")
    _init_state()

    api_key = st.text_input(
        "OpenAI API Key",
        value=OPENAI_API_KEY,
        type="password",
        help="Leave empty to keep original names (no model calls are made).",
    )
    services = _get_services(api_key)

    uploads = st.file_uploader(
        "Files",
        accept_multiple_files=True,
        key=f"uploader_{st.session_state['uploader_key']}",
    )
    files = _descriptors_from_uploads(uploads or [])
    st.session_state["files"] = files
    current_ids = {file.file_id for file in files}
    if any(entry.file_id not in current_ids for entry in st.session_state["plan"]):
        st.session_state["plan"] = [
            entry for entry in st.session_state["plan"] if entry.file_id in current_ids
        ]
        st.session_state["plan_version"] += 1
    if files:
        total = sum(file.size_bytes for file in files)
        st.caption(f"{len(files)} files, {format_file_size(total)}")

    instructions = st.text_area(
        "Naming instructions (optional)",
        help="For example: prefix every file with the project code ACME.",
    )

    cols = st.columns(4)
    generate_clicked = cols[0].button("Generate names", disabled=not files)
    rerun_clicked = cols[1].button("Re-run selected", disabled=not st.session_state["plan"])
    select_all_clicked = cols[2].button("Select all", disabled=not st.session_state["plan"])
    clear_clicked = cols[3].button("Clear")

    if clear_clicked:
        _clear_session()
        _trigger_rerun()

    if select_all_clicked:
        st.session_state["plan"] = toggle_all(st.session_state["plan"])
        st.session_state["plan_version"] += 1

    if generate_clicked:
        st.session_state["error"] = None
        try:
            with st.spinner("Extracting content and proposing names..."):
                plan, snippets = services["rename_plan_service"].generate(files, instructions)
            st.session_state["plan"] = plan
            st.session_state["snippets"] = {}
            st.session_state["plan_version"] += 1
            st.session_state["zip_artifact"] = None
            _store_snippets(snippets)
        except Exception as exc:
            logger.exception("Generate failed")
            st.session_state["error"] = f"Failed to generate proposals: {exc}"

    if rerun_clicked:
        st.session_state["error"] = None
        plan = st.session_state["plan"]
        selected = {entry.file_id for entry in plan if entry.included}
        try:
            with st.spinner("Re-running selected files..."):
                plan, snippets = services["rename_plan_service"].rerun(
                    plan, files, selected, instructions
                )
            st.session_state["plan"] = plan
            st.session_state["plan_version"] += 1
            st.session_state["zip_artifact"] = None
            _store_snippets(snippets)
        except Exception as exc:
            logger.exception("Re-run failed")
            st.session_state["error"] = f"Failed to re-run proposals: {exc}"

    if st.session_state.get("error"):
        st.error(st.session_state["error"])

    _render_review_table()
    _render_downloads(services)


if __name__ == "__main__":
    main()
