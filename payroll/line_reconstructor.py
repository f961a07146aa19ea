"""
Line reconstruction: group positioned tokens into reading-order lines.

Tokens whose vertical position rounds to the same integer bucket form one
line, ordered left to right. Lines on a page are ordered by bucket
descending, which is top-of-page first in PDF user space. No numeric
value is interpreted here.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Sequence

from .models import ExtractedText, Line, PageLines, PositionedToken


logger = logging.getLogger(__name__)


def line_text(tokens: Sequence[PositionedToken]) -> str:
    """Join the stripped token texts of a line with single spaces."""
    return ' '.join(token.text.strip() for token in tokens if token.text.strip())


def bucket_of(y: float) -> int:
    """Vertical bucket of a position, with halves rounded up."""
    return math.floor(y + 0.5)


def build_page_lines(tokens: Sequence[PositionedToken], page_number: int) -> PageLines:
    """
    Group one page's tokens into lines.

    Args:
        tokens: Tokens of the page in extractor order
        page_number: 1-based page number

    Returns:
        PageLines with lines ordered top to bottom
    """
    buckets: Dict[int, List[PositionedToken]] = defaultdict(list)
    for token in tokens:
        buckets[bucket_of(token.y)].append(token)

    lines = []
    for y in sorted(buckets, reverse=True):
        # sorted() is stable so tokens sharing an x keep extractor order
        row = sorted(buckets[y], key=lambda t: t.x)
        lines.append(Line(y=y, tokens=row, text=line_text(row), page=page_number))

    return PageLines(page_number=page_number, lines=lines)


def reconstruct_lines(pages: Sequence[Sequence[PositionedToken]]) -> ExtractedText:
    """
    Reconstruct reading-order lines for a whole document.

    Args:
        pages: Tokens per page, in page order

    Returns:
        ExtractedText with per-page lines and the flattened line list
    """
    page_lines: List[PageLines] = []
    full_lines: List[str] = []

    for page_number, tokens in enumerate(pages, 1):
        page = build_page_lines(tokens, page_number)
        if not page.lines:
            logger.debug(f"Page {page_number}: no tokens, skipped")
        page_lines.append(page)
        full_lines.extend(line.text for line in page.lines)

    logger.info(f"Reconstructed {len(full_lines)} lines from {len(page_lines)} pages")
    return ExtractedText(pages=page_lines, raw_text='\n'.join(full_lines), full_lines=full_lines)
