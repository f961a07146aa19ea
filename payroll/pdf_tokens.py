"""
Positioned-token extraction from PDF bill documents.

This is the boundary with the text-extraction library: it validates that a
file is a readable, text-bearing PDF and turns every page's words into
PositionedTokens. Nothing downstream touches raw document bytes.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import pdfplumber
import pypdf
from pypdf.errors import PdfReadError

from .exceptions import PDFReadabilityError, TextExtractionError
from .models import PositionedToken


class PdfTokenExtractor:
    """
    Extract positioned tokens from PDF files with pdfplumber.

    pdfplumber measures ``top``/``bottom`` from the top of the page; tokens
    are converted to PDF user space (``page.height - bottom``) so that a
    larger y means higher on the page.
    """

    # Merge characters separated by ordinary spaces into one run, the way
    # bill generators emit header phrases
    WORD_OPTIONS = {
        'keep_blank_chars': True,
        'use_text_flow': True,
        'x_tolerance': 3,
        'y_tolerance': 3,
    }

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def extract(self, pdf_path: Union[str, Path]) -> List[List[PositionedToken]]:
        """
        Extract tokens per page.

        Args:
            pdf_path: Path to the PDF file

        Returns:
            One token list per page, in page order

        Raises:
            PDFReadabilityError: If the file cannot be opened as a PDF
            TextExtractionError: If the document carries no text layer
        """
        pdf_path = Path(pdf_path)
        self.validate_readability(pdf_path)

        pages: List[List[PositionedToken]] = []
        try:
            with pdfplumber.open(pdf_path) as pdf:
                self.logger.info(f"Opened {pdf_path.name}: {len(pdf.pages)} pages")
                for page_num, page in enumerate(pdf.pages, 1):
                    page_tokens = self._page_tokens(page)
                    self.logger.debug(f"Page {page_num}: {len(page_tokens)} tokens")
                    pages.append(page_tokens)
        except Exception as e:
            raise TextExtractionError(
                f"Error during token extraction: {e}",
                source=str(pdf_path),
                extraction_method='pdfplumber',
            ) from e

        if not any(pages):
            raise TextExtractionError(
                "No text could be extracted from PDF",
                source=str(pdf_path),
                extraction_method='pdfplumber',
            )

        return pages

    def _page_tokens(self, page) -> List[PositionedToken]:
        height = float(page.height)
        tokens = []
        for word in page.extract_words(**self.WORD_OPTIONS):
            text = word['text'].strip()
            if not text:
                continue
            x0 = float(word['x0'])
            tokens.append(PositionedToken(
                text=text,
                x=x0,
                y=height - float(word['bottom']),
                width=float(word['x1']) - x0,
            ))
        return tokens

    def validate_readability(self, pdf_path: Path) -> None:
        """
        Check that the file exists and is an unencrypted PDF with pages.

        Raises:
            PDFReadabilityError: If the PDF cannot be read
        """
        if not pdf_path.exists():
            raise PDFReadabilityError(f"PDF file not found: {pdf_path}", source=str(pdf_path))

        if not pdf_path.is_file():
            raise PDFReadabilityError(f"Path is not a file: {pdf_path}", source=str(pdf_path))

        try:
            reader = pypdf.PdfReader(str(pdf_path))
            if reader.is_encrypted:
                raise PDFReadabilityError("PDF is encrypted", source=str(pdf_path))
            if len(reader.pages) == 0:
                raise PDFReadabilityError("PDF contains no pages", source=str(pdf_path))
        except PDFReadabilityError:
            raise
        except (PdfReadError, OSError, ValueError) as e:
            raise PDFReadabilityError(
                f"PDF syntax error: {e}",
                source=str(pdf_path),
                original_error=e,
            ) from e
