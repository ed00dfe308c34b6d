import unittest

from filerenamer.domain.export_rendering import RenamingMapRow, render_renaming_csv


class ExportRenderingTests(unittest.TestCase):
    def test_header_and_rows_are_fully_quoted(self) -> None:
        output = render_renaming_csv(
            [
                RenamingMapRow("scan 1.pdf", "invoice-acme.pdf", 0.9, 'Header says "INVOICE".'),
                RenamingMapRow("a,b.txt", "notes.txt", 0.333, "Line one\nline two"),
            ]
        )
        self.assertEqual(
            output,
            '"Original Name","New Name","Confidence","Rationale"\n'
            '"scan 1.pdf","invoice-acme.pdf","0.90","Header says ""INVOICE""."\n'
            '"a,b.txt","notes.txt","0.33","Line one\nline two"\n',
        )

    def test_empty_rows_render_header_only(self) -> None:
        self.assertEqual(
            render_renaming_csv([]),
            '"Original Name","New Name","Confidence","Rationale"\n',
        )


if __name__ == "__main__":
    unittest.main()
