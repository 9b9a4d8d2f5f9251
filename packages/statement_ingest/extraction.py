"""Text extraction collaborator for PDF statements (pdfplumber)."""

from __future__ import annotations

import asyncio
from io import BytesIO
from typing import Protocol

import pdfplumber

from .errors import TextExtractionError
from .logging_setup import get_logger

_logger = get_logger("statement_ingest.extraction")


class TextExtractor(Protocol):
    async def extract(self, content: bytes) -> str:
        """Return the concatenated text of the document.

        Failures should raise :class:`TextExtractionError`; the orchestrator
        wraps anything else the same way.
        """
        ...


def extract_pdf_text(content: bytes) -> str:
    """Blocking extraction: page texts joined by a blank line.

    Pages without a text layer contribute nothing.
    """

    pages: list[str] = []
    with pdfplumber.open(BytesIO(content)) as pdf:
        for page in pdf.pages:
            pages.append(page.extract_text() or "")
    return "\n\n".join(pages)


class PdfPlumberExtractor:
    """Run :func:`extract_pdf_text` in a worker thread."""

    async def extract(self, content: bytes) -> str:
        try:
            text = await asyncio.to_thread(extract_pdf_text, content)
        except Exception as e:  # noqa: BLE001 - pdfminer raises a wide range of types
            _logger.warning("extraction:failed error=%s", e)
            raise TextExtractionError(f"Failed to extract text from PDF: {e}") from e
        _logger.debug("extraction:ok chars=%d", len(text))
        return text


__all__ = ["TextExtractor", "extract_pdf_text", "PdfPlumberExtractor"]
