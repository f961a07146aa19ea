"""
Row segmentation: turn each page's lines into per-employee blocks.

An anchor line starts with a serial number and an 8-digit identifier and
carries the employee's numeric values. Names print above the anchor
(starting at an honorific) and sometimes continue below it, so each block
takes the lines between the previous employee and its anchor plus any
continuation lines that follow.
"""

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from .models import EmployeeBlock, Line, PageLines, TotalRow
from .schema_detector import is_name_prefix


logger = logging.getLogger(__name__)

ANCHOR_PATTERN = re.compile(r'^(\d+)\s+(\d{8})\s')
TOTAL_PATTERN = re.compile(r'^total\b', re.IGNORECASE)
NUMBER_PATTERN = re.compile(r'-?\d+\.?\d*')

# Institutional boilerplate, certification text and office metadata
NOISE_PATTERNS = [
    re.compile(r'karmyogi|gujarat\.gov', re.IGNORECASE),
    TOTAL_PATTERN,
    re.compile(r'hereby certify|rupees\s*(\(|:)|superintendent|cardex\s*no|date\s*:', re.IGNORECASE),
    re.compile(r'PAYBILL|INNER SHEET|D\.D\.O|Name\s+of\s+(Office|D\.D\.O|Ministry)|Phone\s*no|Taluka'
               r'|E-Mail|Address|Department|Major\s+Head|TAN\s+No|Bill\s+No|Cardex\s+No', re.IGNORECASE),
    re.compile(r'^ESIS\s+General\s+Hospital', re.IGNORECASE),
]


def is_noise_line(text: str) -> bool:
    """True for blank lines and lines that never belong to an employee."""
    if not text or not text.strip():
        return True
    return any(pattern.search(text) for pattern in NOISE_PATTERNS)


def is_anchor_line(text: str) -> bool:
    return bool(ANCHOR_PATTERN.match(text))


def is_total_line(text: str) -> bool:
    return bool(TOTAL_PATTERN.match(text.strip()))


def extract_numbers(text: str) -> List[Decimal]:
    """Every number-like substring of text, in order."""
    return [Decimal(match) for match in NUMBER_PATTERN.findall(text)]


@dataclass
class SegmentationResult:
    """Blocks found in a document and its running total row, if any."""
    blocks: List[EmployeeBlock] = field(default_factory=list)
    total_row: Optional[TotalRow] = None


class RowSegmenter:
    """Locate anchors on every page and assemble bounded blocks around them."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def segment(self, pages: Sequence[PageLines]) -> SegmentationResult:
        """
        Segment every page of a document.

        Args:
            pages: Reading-order lines per page

        Returns:
            SegmentationResult with blocks in document order; the last total
            row seen in the document is kept
        """
        result = SegmentationResult()

        for page in pages:
            if not page.lines:
                continue

            anchor_indices, total_row = self._scan_page(page)
            if total_row is not None:
                result.total_row = total_row

            if not anchor_indices:
                continue

            header_end = self._header_end(page.lines)
            for position in range(len(anchor_indices)):
                block = self._build_block(page, anchor_indices, position, header_end)
                if block is not None:
                    result.blocks.append(block)

            self.logger.debug(f"Page {page.page_number}: {len(anchor_indices)} anchors")

        self.logger.info(f"Segmented {len(result.blocks)} employee blocks")
        return result

    def _scan_page(self, page: PageLines):
        anchor_indices: List[int] = []
        total_row: Optional[TotalRow] = None

        for index, line in enumerate(page.lines):
            if is_anchor_line(line.text):
                anchor_indices.append(index)
            if is_total_line(line.text):
                total_row = TotalRow(raw_text=line.text, page=page.page_number,
                                     values=extract_numbers(line.text))

        return anchor_indices, total_row

    def _header_end(self, lines: Sequence[Line]) -> int:
        """Index of the first name line or data row on the page."""
        for index, line in enumerate(lines):
            if is_name_prefix(line.text) or is_anchor_line(line.text):
                return index
        return 0

    def _build_block(self, page: PageLines, anchor_indices: List[int], position: int,
                     header_end: int) -> Optional[EmployeeBlock]:
        lines = page.lines
        anchor_index = anchor_indices[position]
        anchor = lines[anchor_index]

        region_start = header_end if position == 0 else anchor_indices[position - 1] + 1

        # The block starts at the earliest name line in the region, so lines
        # before it stay with the previous employee's continuation
        block_start = anchor_index
        for index in range(region_start, anchor_index):
            text = lines[index].text.strip()
            if is_noise_line(text):
                continue
            if is_name_prefix(text) or position == 0:
                block_start = index
                break

        block_lines = [line for line in lines[block_start:anchor_index]
                       if not is_noise_line(line.text.strip())]
        block_lines.append(anchor)

        next_boundary = anchor_indices[position + 1] if position + 1 < len(anchor_indices) else len(lines)
        for line in lines[anchor_index + 1:next_boundary]:
            text = line.text.strip()
            if is_total_line(text) or is_name_prefix(text):
                break
            if is_noise_line(text):
                continue
            block_lines.append(line)

        match = ANCHOR_PATTERN.match(anchor.text)
        if not match:
            return None

        return EmployeeBlock(
            serial_number=int(match.group(1)),
            identifier=match.group(2),
            lines=block_lines,
            anchor=anchor,
            page=page.page_number,
        )
