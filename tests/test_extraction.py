import asyncio

import pytest

from statement_ingest.errors import TextExtractionError
from statement_ingest.extraction import PdfPlumberExtractor, extract_pdf_text


def test_extractor_wraps_parse_failures():
    with pytest.raises(TextExtractionError, match="Failed to extract text from PDF"):
        asyncio.run(PdfPlumberExtractor().extract(b"definitely not a pdf"))


def test_extract_pdf_text_joins_pages(monkeypatch):
    class _Page:
        def __init__(self, text):
            self._text = text

        def extract_text(self):
            return self._text

    class _Pdf:
        pages = [_Page("01/02/2024  A  -1.00"), _Page(None), _Page("01/03/2024  B  -2.00")]

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    monkeypatch.setattr("statement_ingest.extraction.pdfplumber.open", lambda _fp: _Pdf())

    assert extract_pdf_text(b"%PDF") == "01/02/2024  A  -1.00\n\n\n\n01/03/2024  B  -2.00"
