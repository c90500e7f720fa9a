# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-11
# Description: PdfTextExtractor
# -----------------------------------------------------------------------------
import re
import time
import unicodedata
from typing import List

import fitz

from errors.RagErrors import DocumentImportError
from utility.logging_utils import get_class_logger

PDF_MAGIC = b"%PDF-"
MIN_TEXT_CHARS = 10

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n]")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """CRLF -> LF, collapse 3+ newlines to 2, drop control characters. Keeps any script."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    text = "".join(
        ch for ch in text if ch in "\n\t" or not unicodedata.category(ch).startswith("C")
    )
    return text.strip()


def clean_text(text: str) -> str:
    """normalize_text, then keep printable ASCII only. Used for PDF extraction output."""
    return _NON_PRINTABLE.sub("", normalize_text(text)).strip()


class PdfTextExtractor:
    def __init__(self, logger=None):
        self.logger = logger or get_class_logger(self.__class__)

    def extract_pages(self, pdf_bytes: bytes) -> List[str]:
        """
        Extracts text from PDF bytes using PyMuPDF (fitz).
        Returns: list of page texts (page 1 = index 0)
        """
        start = time.time()
        page_texts: List[str] = []
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            for page in doc:
                page_texts.append((page.get_text("text") or "").strip())

            elapsed = (time.time() - start) * 1000.0
            self.logger.info("Extracted text from PDF (%d pages, %.1f ms)", len(doc), elapsed)

        return page_texts

    def extract_text(self, pdf_bytes: bytes, *, file_name: str) -> str:
        """Validated, cleaned text of the whole PDF. Raises DocumentImportError."""
        if PDF_MAGIC not in pdf_bytes[:1024]:
            raise DocumentImportError("Invalid PDF header", file_name=file_name)

        try:
            pages = self.extract_pages(pdf_bytes)
        except (fitz.FileDataError, RuntimeError, ValueError) as e:
            self.logger.error("Failed to extract text from %s: %s", file_name, e)
            raise DocumentImportError(f"PDF parsing failed: {e}", file_name=file_name) from e

        raw = "\n\n".join(p for p in pages if p)
        if not raw.strip():
            raise DocumentImportError("No text content extracted from PDF", file_name=file_name)

        text = clean_text(raw)
        if len(text) < MIN_TEXT_CHARS:
            raise DocumentImportError(
                "Extracted text too short or invalid",
                file_name=file_name,
                details={"chars": len(text)},
            )
        return text
