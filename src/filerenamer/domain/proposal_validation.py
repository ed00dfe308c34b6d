from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import date

from .doc_types import DocType, parse_doc_type
from .models import FALLBACK_CONFIDENCE, FALLBACK_RATIONALE, FilenameProposal
from .rename_logic import normalize_date, strip_extension

MIN_PROPOSED_FILENAME_LENGTH = 3
MAX_RATIONALE_LENGTH = 280
_OPTIONAL_TEXT_FIELDS = ("primary_entity", "secondary_entity", "topic")
_MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)


@dataclass
class ProposalParseResult:
    proposal: FilenameProposal | None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.proposal is not None


def fallback_proposal(original_name: str) -> FilenameProposal:
    return FilenameProposal(
        proposed_filename=strip_extension(original_name),
        confidence=FALLBACK_CONFIDENCE,
        doc_type=DocType.OTHER,
        date_iso=None,
        primary_entity=None,
        secondary_entity=None,
        topic=None,
        rationale=FALLBACK_RATIONALE,
    )


def find_json_object(text: str) -> str | None:
    """
    Return the first balanced top-level JSON object embedded in `text`.

    Braces inside string literals are ignored.

    Examples:
        >>> find_json_object('Sure! {"a": "}"} trailing {"b": 1}')
        '{"a": "}"}'
        >>> find_json_object("no json here") is None
        True
    """
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            ch = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def parse_proposal(raw_text: str, snippet: str = "") -> ProposalParseResult:
    """
    Parse and validate raw model output into a FilenameProposal.

    The date is repaired rather than rejected: an unreadable date, or one
    with no evidence in `snippet`, becomes None.
    """
    if not raw_text or not raw_text.strip():
        return ProposalParseResult(None, "empty response")
    candidate = find_json_object(raw_text)
    if candidate is None:
        return ProposalParseResult(None, "no JSON object in response")
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        return ProposalParseResult(None, f"invalid JSON: {exc.msg}")
    except (ValueError, RecursionError) as exc:
        return ProposalParseResult(None, f"unreadable JSON: {type(exc).__name__}")
    if not isinstance(data, dict):
        return ProposalParseResult(None, "JSON payload is not an object")

    proposed = data.get("proposed_filename")
    if not isinstance(proposed, str) or len(proposed) < MIN_PROPOSED_FILENAME_LENGTH:
        return ProposalParseResult(None, "proposed_filename missing or too short")

    confidence = data.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return ProposalParseResult(None, "confidence is not a number")
    if not 0.0 <= confidence <= 1.0:
        return ProposalParseResult(None, "confidence out of range")

    doc_type_value = data.get("doctype")
    if not isinstance(doc_type_value, str):
        return ProposalParseResult(None, "doctype missing")
    try:
        doc_type = parse_doc_type(doc_type_value)
    except ValueError:
        return ProposalParseResult(None, f"doctype not allowed: {doc_type_value}")

    rationale = data.get("rationale")
    if not isinstance(rationale, str):
        return ProposalParseResult(None, "rationale missing")
    if len(rationale) > MAX_RATIONALE_LENGTH:
        return ProposalParseResult(None, "rationale too long")

    optional: dict[str, str | None] = {}
    for field in (*_OPTIONAL_TEXT_FIELDS, "date_iso"):
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            return ProposalParseResult(None, f"{field} must be a string or null")
        optional[field] = (value.strip() or None) if isinstance(value, str) else None

    date_iso = normalize_date(optional["date_iso"])
    if date_iso is not None and not has_date_evidence(date_iso, snippet):
        date_iso = None

    return ProposalParseResult(
        FilenameProposal(
            proposed_filename=proposed,
            confidence=float(confidence),
            doc_type=doc_type,
            date_iso=date_iso,
            primary_entity=optional["primary_entity"],
            secondary_entity=optional["secondary_entity"],
            topic=optional["topic"],
            rationale=rationale,
        )
    )


def has_date_evidence(date_iso: str, text: str) -> bool:
    """
    Return True when `text` mentions the calendar date `date_iso`.

    Numeric (ISO, compact, slashed, dotted, day-first and month-first) and
    month-name renderings are recognised. Partial dates do not count.

    Examples:
        >>> has_date_evidence("2024-03-01", "Invoice dated 01/03/2024")
        True
        >>> has_date_evidence("2024-03-01", "Paid on March 1st, 2024")
        True
        >>> has_date_evidence("2024-03-01", "A photo of a beach")
        False
    """
    if not text:
        return False
    try:
        value = date.fromisoformat(date_iso)
    except ValueError:
        return False
    lowered = text.lower()
    for pattern in _numeric_date_patterns(value):
        if re.search(rf"(?<!\d){pattern}(?!\d)", lowered):
            return True
    return any(re.search(pattern, lowered) for pattern in _month_name_patterns(value))


def _numeric_date_patterns(value: date) -> list[str]:
    year = f"{value.year:04d}"
    short_year = year[2:]
    months = {f"{value.month:02d}", str(value.month)}
    days = {f"{value.day:02d}", str(value.day)}
    patterns = [f"{year}{value.month:02d}{value.day:02d}"]
    for sep in ("-", "/", r"\.", "_"):
        for month in months:
            for day in days:
                patterns.append(f"{year}{sep}{month}{sep}{day}")
                for y in (year, short_year):
                    patterns.append(f"{day}{sep}{month}{sep}{y}")
                    patterns.append(f"{month}{sep}{day}{sep}{y}")
    return patterns


def _month_name_patterns(value: date) -> list[str]:
    full = _MONTH_NAMES[value.month - 1]
    month = rf"(?:{full}|{full[:3]}\.?)"
    day = rf"0?{value.day}(?:st|nd|rd|th)?"
    year = f"{value.year:04d}"
    return [
        rf"\b{month}\s+{day},?\s+{year}\b",
        rf"\b{day}\s+(?:of\s+)?{month},?\s+{year}\b",
    ]
