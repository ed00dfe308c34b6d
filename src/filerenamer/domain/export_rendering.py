from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Iterable

CSV_HEADER = ("Original Name", "New Name", "Confidence", "Rationale")


@dataclass(frozen=True)
class RenamingMapRow:
    original_name: str
    final_name: str
    confidence: float
    rationale: str


def render_renaming_csv(rows: Iterable[RenamingMapRow]) -> str:
    """
    Render the original-to-new name map as CSV.

    Every cell is quoted and embedded quotes are doubled.

    Example:
        render_renaming_csv([RenamingMapRow("a.pdf", "invoice.pdf", 0.9, "Paid invoice")])
        # '"Original Name","New Name","Confidence","Rationale"\\n'
        # '"a.pdf","invoice.pdf","0.90","Paid invoice"\\n'
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(
            [
                row.original_name,
                row.final_name,
                f"{row.confidence:.2f}",
                row.rationale,
            ]
        )
    return buffer.getvalue()
