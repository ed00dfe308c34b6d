import re

from filerenamer.domain.doc_types import DocType
from filerenamer.domain.models import FilenameProposal
from filerenamer.domain.rename_logic import (
    DuplicateCandidate,
    build_filename,
    ensure_stem,
    estimate_tokens,
    get_extension,
    normalize_date,
    resolve_duplicates,
    sanitize_filename,
    strip_extension,
    truncate_to_tokens,
)

_SAFE_RE = re.compile(r"^[a-z0-9\-_.]*$")
_SAMPLES = [
    "",
    "   ",
    "Quarterly Budget Review",
    "  --Leading and trailing--  ",
    "Invoice #123 / ACME: Corp?",
    "tabs\tand\nnewlines",
    "Ünïcödé naïve café",
    "İstanbul trip",
    "a" * 300,
    "a " * 100,
    "---",
    "already-clean_name.v2",
    "émoji 🎉 party!!!",
]


def _proposal(**overrides) -> FilenameProposal:
    values = {
        "proposed_filename": "x",
        "confidence": 0.8,
        "doc_type": DocType.OTHER,
        "date_iso": None,
        "primary_entity": None,
        "secondary_entity": None,
        "topic": None,
        "rationale": "test",
    }
    values.update(overrides)
    return FilenameProposal(**values)


def test_sanitize_output_is_safe_for_all_samples() -> None:
    for sample in _SAMPLES:
        result = sanitize_filename(sample)
        assert _SAFE_RE.match(result), sample
        assert not result.startswith("-")
        assert not result.endswith("-")
        assert "--" not in result
        assert len(result) <= 120


def test_sanitize_is_idempotent() -> None:
    for sample in _SAMPLES:
        once = sanitize_filename(sample)
        assert sanitize_filename(once) == once


def test_sanitize_examples() -> None:
    assert sanitize_filename("  Quarterly Budget Review ") == "quarterly-budget-review"
    assert sanitize_filename("Invoice #123 / ACME") == "invoice-123-acme"
    assert sanitize_filename("???") == ""
    assert sanitize_filename("a" * 300) == "a" * 120


def test_build_uses_long_proposed_filename_directly() -> None:
    proposal = _proposal(
        proposed_filename="quarterly-budget-review",
        doc_type=DocType.REPORT,
        primary_entity="Ignored Corp",
        date_iso="2024-01-01",
    )
    assert build_filename(proposal) == sanitize_filename("quarterly-budget-review")


def test_build_composes_slots_for_short_proposed_filename() -> None:
    proposal = _proposal(
        proposed_filename="x",
        doc_type=DocType.INVOICE,
        primary_entity="Acme Corp",
        date_iso="2024-03-01",
    )
    assert build_filename(proposal) == "invoice-acme-corp-2024-03-01"


def test_build_slot_order_and_other_doctype_omitted() -> None:
    proposal = _proposal(
        proposed_filename="ab",
        doc_type=DocType.OTHER,
        primary_entity="Acme",
        secondary_entity="Globex",
        topic="Merger Plan",
    )
    assert build_filename(proposal) == "acme-globex-merger-plan"


def test_build_falls_back_to_proposed_filename_when_slots_empty() -> None:
    proposal = _proposal(proposed_filename="Scan", primary_entity="???")
    assert build_filename(proposal) == "scan"


def test_resolve_versions_repeated_names_in_order() -> None:
    result = resolve_duplicates(
        [
            DuplicateCandidate("1", "report", ".pdf"),
            DuplicateCandidate("2", "report", ".pdf"),
            DuplicateCandidate("3", "report", ".pdf"),
        ]
    )
    assert result == {"1": "report.pdf", "2": "report-v2.pdf", "3": "report-v3.pdf"}


def test_resolve_leaves_distinct_names_unchanged() -> None:
    result = resolve_duplicates([("1", "a", ".txt"), ("2", "b", ".txt")])
    assert result == {"1": "a.txt", "2": "b.txt"}


def test_resolve_same_name_different_extension_is_not_a_collision() -> None:
    result = resolve_duplicates([("1", "a", ".txt"), ("2", "a", ".pdf")])
    assert result == {"1": "a.txt", "2": "a.pdf"}


def test_resolve_does_not_check_versioned_names_against_plain_names() -> None:
    result = resolve_duplicates(
        [("1", "report", ".pdf"), ("2", "report", ".pdf"), ("3", "report-v2", ".pdf")]
    )
    assert result["2"] == "report-v2.pdf"
    assert result["3"] == "report-v2.pdf"


def test_resolve_counts_are_not_shared_between_calls() -> None:
    first = resolve_duplicates([("1", "a", ".txt")])
    second = resolve_duplicates([("2", "a", ".txt")])
    assert first == {"1": "a.txt"}
    assert second == {"2": "a.txt"}


def test_resolve_with_seed_names() -> None:
    result = resolve_duplicates(
        [("3", "report", ".pdf")], seed_names=["report.pdf", "report.pdf"]
    )
    assert result == {"3": "report-v3.pdf"}


def test_extension_helpers() -> None:
    assert get_extension("archive.tar.gz") == ".gz"
    assert get_extension(".env") == ""
    assert get_extension("README") == ""
    assert strip_extension("IMG_20240301.jpg") == "IMG_20240301"
    assert strip_extension("archive.tar.gz") == "archive.tar"
    assert strip_extension("README") == "README"


def test_token_helpers() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcde") == 2
    assert truncate_to_tokens("short", 500) == "short"
    truncated = truncate_to_tokens("y" * 2500, 500)
    assert truncated == "y" * 2000 + "..."


def test_normalize_date() -> None:
    assert normalize_date("2024-03-01") == "2024-03-01"
    assert normalize_date("2024/03/01") == "2024-03-01"
    assert normalize_date("2024-03-01T10:15:00Z") == "2024-03-01"
    assert normalize_date("2024:03:01 10:15:00") == "2024-03-01"
    assert normalize_date("March 1, 2024") == "2024-03-01"
    assert normalize_date("not a date") is None
    assert normalize_date("") is None
    assert normalize_date(None) is None


def test_resolve_skips_taken_names() -> None:
    result = resolve_duplicates(
        [("2", "report", ".pdf")],
        seed_names=["report.pdf", "report.pdf"],
        taken_names=["report.pdf", "report-v3.pdf"],
    )
    assert result == {"2": "report-v4.pdf"}


def test_ensure_stem_keeps_a_built_name() -> None:
    assert ensure_stem("invoice-acme", "scan.pdf") == "invoice-acme"


def test_ensure_stem_falls_back_to_original_then_constant() -> None:
    assert ensure_stem("", "Scan 01.pdf") == "scan-01"
    assert ensure_stem("", "請求書.pdf") == "file"
    assert ensure_stem("", ".env") == "file"
