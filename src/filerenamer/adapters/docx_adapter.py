from __future__ import annotations

import io

from docx import Document

from filerenamer.ports.text_extractor_port import TextExtractorPort


class DocxTextAdapter(TextExtractorPort):
    def extract_text(self, data: bytes) -> str:
        try:
            document = Document(io.BytesIO(data))
        except Exception as exc:
            raise RuntimeError("Failed to open Word document bytes.") from exc
        lines = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append(" | ".join(cells))
        return "\n".join(lines)
