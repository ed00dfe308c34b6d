from filerenamer.domain.doc_types import DocType
from filerenamer.domain.models import FileDescriptor, FilenameProposal, RenamePlanEntry
from filerenamer.ui_streamlit.helpers import apply_row_edits, format_file_size, plan_to_rows


def _entry(file_id: str, final_name: str) -> RenamePlanEntry:
    proposal = FilenameProposal(
        proposed_filename="invoice-acme",
        confidence=0.876,
        doc_type=DocType.INVOICE,
        date_iso=None,
        primary_entity="Acme",
        secondary_entity=None,
        topic=None,
        rationale="Invoice header",
    )
    return RenamePlanEntry(file_id, proposal, "invoice-acme", final_name)


def _files() -> list[FileDescriptor]:
    return [
        FileDescriptor("1", "scan1.pdf", "application/pdf", 10, b"x"),
        FileDescriptor("2", "scan2.pdf", "application/pdf", 10, b"y"),
    ]


def test_plan_to_rows() -> None:
    rows = plan_to_rows([_entry("1", "invoice-acme.pdf")], _files())
    assert rows == [
        {
            "file_id": "1",
            "include": True,
            "original_name": "scan1.pdf",
            "new_name": "invoice-acme.pdf",
            "confidence": 0.88,
            "doctype": "invoice",
            "rationale": "Invoice header",
            "edited": False,
        }
    ]


def test_apply_row_edits_marks_renamed_entries() -> None:
    plan = [_entry("1", "invoice-acme.pdf"), _entry("2", "invoice-acme-v2.pdf")]
    rows = plan_to_rows(plan, _files())
    rows[1]["new_name"] = "  acme-march.pdf "
    rows[0]["include"] = False

    updated = apply_row_edits(plan, rows)
    assert updated[0].included is False
    assert updated[0].edited is False
    assert updated[1].final_name == "acme-march.pdf"
    assert updated[1].edited is True


def test_apply_row_edits_ignores_blank_names_and_unknown_rows() -> None:
    plan = [_entry("1", "invoice-acme.pdf")]
    rows = plan_to_rows(plan, _files())
    rows[0]["new_name"] = ""
    rows.append({"file_id": "999", "include": False, "new_name": "x.pdf"})
    assert apply_row_edits(plan, rows) == plan


def test_apply_row_edits_without_changes_returns_same_plan() -> None:
    plan = [_entry("1", "invoice-acme.pdf")]
    assert apply_row_edits(plan, plan_to_rows(plan, _files())) is plan


def test_format_file_size() -> None:
    assert format_file_size(512) == "512 B"
    assert format_file_size(2048) == "2.0 KB"
    assert format_file_size(5 * 1024 * 1024) == "5.0 MB"
