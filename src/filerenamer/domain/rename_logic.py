from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Iterable, NamedTuple

from .doc_types import DocType
from .models import FilenameProposal

MAX_FILENAME_LENGTH = 120
OVERRIDE_MIN_LENGTH = 5
CHARS_PER_TOKEN = 4
TRUNCATION_MARKER = "..."
FALLBACK_STEM = "file"

_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_CHARS_RE = re.compile(r"[^a-z0-9\-_.]")
_DASH_RUN_RE = re.compile(r"-+")
_EXTENSION_RE = re.compile(r"\.[^/.]+$")


class DuplicateCandidate(NamedTuple):
    file_id: str
    name: str
    ext: str


def sanitize_filename(name: str) -> str:
    """
    Turn an arbitrary string into a lowercase, kebab-case filename fragment.

    Examples:
        >>> sanitize_filename("  Quarterly Budget: Q1  ")
        'quarterly-budget-q1'
        >>> sanitize_filename("--a__b--")
        'a__b'
        >>> sanitize_filename("???")
        ''
    """
    lowered = (name or "").lower().strip()
    dashed = _WHITESPACE_RE.sub("-", lowered)
    dashed = _UNSAFE_CHARS_RE.sub("-", dashed)
    dashed = _DASH_RUN_RE.sub("-", dashed).strip("-")
    # the cut can leave a trailing dash behind
    return dashed[:MAX_FILENAME_LENGTH].strip("-")


def build_filename(proposal: FilenameProposal) -> str:
    """
    Assemble an extension-free filename from a proposal.

    A proposed filename longer than five characters is used as-is (after
    sanitizing); otherwise the name is composed from doctype, entities,
    topic and date.

    Example:
        proposal.proposed_filename = "x", doc_type = DocType.INVOICE,
        primary_entity = "Acme Corp", date_iso = "2024-03-01"
        build_filename(proposal)
        # 'invoice-acme-corp-2024-03-01'
    """
    proposed = proposal.proposed_filename or ""
    if len(proposed) > OVERRIDE_MIN_LENGTH:
        return sanitize_filename(proposed)

    parts: list[str] = []
    if proposal.doc_type and proposal.doc_type != DocType.OTHER:
        parts.append(proposal.doc_type.value)
    for slot in (proposal.primary_entity, proposal.secondary_entity, proposal.topic):
        if slot:
            part = sanitize_filename(slot)
            if part:
                parts.append(part)
    if proposal.date_iso:
        parts.append(proposal.date_iso)

    combined = sanitize_filename("-".join(parts))
    return combined or sanitize_filename(proposed)


def ensure_stem(filename: str, original_name: str) -> str:
    """
    Return `filename`, or a usable stem when it sanitized down to nothing.

    Examples:
        >>> ensure_stem("", "Scan 01.pdf")
        'scan-01'
        >>> ensure_stem("", "???.pdf")
        'file'
    """
    if filename:
        return filename
    return sanitize_filename(strip_extension(original_name)) or FALLBACK_STEM


def resolve_duplicates(
    candidates: Iterable[DuplicateCandidate | tuple[str, str, str]],
    seed_names: Iterable[str] = (),
    taken_names: Iterable[str] = (),
) -> dict[str, str]:
    """
    Give every candidate a distinct final name; first seen keeps the plain name.

    `seed_names` are full names (name + ext) already held by entries outside
    this call; each one counts as an earlier occurrence. A generated name that
    is in `taken_names` is skipped for the next version. Collisions are only
    tracked on the plain `name + ext` key, so a generated `-v2` name is not
    checked against later plain names.

    Example:
        resolve_duplicates([("1", "report", ".pdf"), ("2", "report", ".pdf")])
        # {'1': 'report.pdf', '2': 'report-v2.pdf'}
    """
    taken = set(taken_names)
    counts: dict[str, int] = {}
    for seed in seed_names:
        counts[seed] = counts.get(seed, 0) + 1

    resolved: dict[str, str] = {}
    for file_id, name, ext in candidates:
        full_name = f"{name}{ext}"
        count = counts.get(full_name, 0)
        final_name = full_name if count == 0 else f"{name}-v{count + 1}{ext}"
        while final_name in taken:
            count += 1
            final_name = f"{name}-v{count + 1}{ext}"
        resolved[file_id] = final_name
        counts[full_name] = count + 1
    return resolved


def get_extension(filename: str) -> str:
    """
    Return the extension including the dot; dotfiles have no extension.

    Examples:
        >>> get_extension("report.final.pdf")
        '.pdf'
        >>> get_extension(".env")
        ''
    """
    last_dot = filename.rfind(".")
    return filename[last_dot:] if last_dot > 0 else ""


def strip_extension(filename: str) -> str:
    return _EXTENSION_RE.sub("", filename)


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def truncate_to_tokens(text: str, max_tokens: int) -> str:
    return truncate_chars(text, max_tokens * CHARS_PER_TOKEN)


def truncate_chars(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y%m%d",
    "%Y:%m:%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
)


def normalize_date(value: str | date | None) -> str | None:
    """
    Normalize a date-like value to YYYY-MM-DD, or None when it cannot be read.

    Examples:
        >>> normalize_date("2024/03/01")
        '2024-03-01'
        >>> normalize_date("2024-03-01T10:15:00Z")
        '2024-03-01'
        >>> normalize_date("not a date") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    head = text.split("T")[0].split(" ")[0] if text[:4].isdigit() else text
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(head, fmt).date().isoformat()
        except ValueError:
            continue
    return None
