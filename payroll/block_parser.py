"""
Employee block parsing.

Splits a block into the lines before the anchor, the anchor itself and
the lines after it, then assembles the employee's full name, finds the
designation and extracts the ordered numeric values from the anchor.
"""

import logging
import re
from decimal import Decimal
from typing import List, Optional, Tuple

from .exceptions import BlockParsingError
from .models import DocumentKind, EmployeeBlock, ParsedEmployee


logger = logging.getLogger(__name__)

DESIGNATIONS = (
    'Specialist',
    'Insurance Medical Officer',
    'Administrative Officer',
    'Junior Clerk',
    'Senior Clerk',
    'Junior Pharmacist',
    'Senior Pharmacist',
    'Matron',
    'Laboratory Technician',
    'Physiotherapist',
    'Head Nurse',
    'Staff Nurse',
    'Superintendent',
    'Peon',
    'Sweeper',
    'Watchman',
    'Driver',
    'Class-IV',
    'Class-III',
)

# Longest first so "Superintendent" never loses to a shorter overlapping title
DESIGNATIONS_BY_LENGTH = tuple(sorted(DESIGNATIONS, key=len, reverse=True))

PAY_SCALE_LINE = re.compile(
    r'^(PB-\d|pb-\d|\d{4,5}\)/|\d{4,5}-\d|37400-|20200\)|34800\)|39100\)|67000|4440-)',
    re.IGNORECASE,
)

PAY_SCALE_FRAGMENTS = [
    (re.compile(r'\s*PB-\d\s*\([^)]*-?$', re.IGNORECASE), ''),
    (re.compile(r'\s*PB-\d\s*\([^)]*\)/\d+', re.IGNORECASE), ''),
    (re.compile(r'\s*\d{4,5}\)/\d+'), ''),
    (re.compile(r'\s*\d{5}-\d{5}/\d+'), ''),
    (re.compile(r'\s*\d{4}-\d{4}/\d{4}'), ''),
    (re.compile(r'\s*\d{4}/\d{4}'), ''),
    (re.compile(r'\s*4440-\s*'), ''),
]

ANCHOR_PREFIX = re.compile(r'^\d+\s+\d{8}\s+')
NUMERIC_TOKEN = re.compile(r'^-?\d+\.?\d*$')
NUMBER_PATTERN = re.compile(r'-?\d+\.?\d*')
ELIGIBILITY_FLAGS = ('No', 'Yes')
SINGLE_LETTER = re.compile(r'^[A-Z]$')
PARENTHESIZED = re.compile(r'^\(.*\)$')


def is_pay_scale(text: str) -> bool:
    """True for lines that carry a pay-band annotation."""
    return bool(PAY_SCALE_LINE.match(text.strip()))


def remove_pay_scale(text: str) -> str:
    """Strip pay-band digits so they are never read as name text or amounts."""
    for pattern, replacement in PAY_SCALE_FRAGMENTS:
        text = pattern.sub(replacement, text)
    return text.strip()


def is_designation(text: str) -> bool:
    norm = text.strip().lower()
    return any(norm == designation.lower() for designation in DESIGNATIONS)


def find_designation(text: str) -> Optional[Tuple[str, str, str]]:
    """
    Find a known designation inside text.

    Returns:
        (designation as printed, text before it, text after it) or None
    """
    lowered = text.lower()
    for designation in DESIGNATIONS_BY_LENGTH:
        index = lowered.find(designation.lower())
        if index >= 0:
            end = index + len(designation)
            return text[index:end], text[:index], text[end:]
    return None


def collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


class BlockParser:
    """Parse EmployeeBlocks into ParsedEmployees."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def parse(self, block: EmployeeBlock, kind: DocumentKind,
              source: Optional[str] = None) -> ParsedEmployee:
        """
        Parse one employee block.

        Args:
            block: Block produced by the row segmenter
            kind: Document kind; earning bills mark the value boundary with
                an eligibility flag pair
            source: Document name used in error messages

        Returns:
            ParsedEmployee with name, designation and ordered values

        Raises:
            BlockParsingError: If the anchor prefix cannot be parsed or the
                anchor carries no numeric values
        """
        anchor_text = block.anchor.text
        if not ANCHOR_PREFIX.match(anchor_text):
            raise BlockParsingError(
                f"Cannot parse identifier prefix for block {block.identifier}",
                source=source, page_number=block.page, line_text=anchor_text,
            )

        names_before, names_after, designation = self._parse_context_lines(block)

        tokens = ANCHOR_PREFIX.sub('', anchor_text).split()
        text_tokens, numeric_start = self._split_anchor_tokens(tokens, kind)

        text_part = ' '.join(text_tokens)
        match = find_designation(text_part)
        if match:
            printed, name_part, _ = match
            if not designation:
                designation = printed
            name_on_anchor = name_part.strip()
        else:
            name_on_anchor = text_part.strip()

        name_parts = [part for part in names_before if part]
        if name_on_anchor:
            name_parts.append(name_on_anchor)
        name_parts.extend(part for part in names_after if part)

        full_name = collapse_whitespace(' '.join(name_parts))
        full_name = collapse_whitespace(remove_pay_scale(full_name))

        numeric_part = ' '.join(tokens[numeric_start:]) if numeric_start >= 0 else ''
        values = [Decimal(number) for number in NUMBER_PATTERN.findall(numeric_part)]
        if not values:
            raise BlockParsingError(
                f"No numeric values on data line for {block.identifier}",
                source=source, page_number=block.page, line_text=anchor_text,
            )

        self.logger.debug(f"Parsed {block.identifier}: name={full_name!r}, "
                          f"designation={designation!r}, {len(values)} values")

        return ParsedEmployee(
            serial_number=block.serial_number,
            identifier=block.identifier,
            name=full_name,
            designation=designation or '',
            values=values,
        )

    def _parse_context_lines(self, block: EmployeeBlock) -> Tuple[List[str], List[str], str]:
        """Collect name fragments around the anchor and the first designation seen."""
        names_before: List[str] = []
        names_after: List[str] = []
        designation = ''
        past_anchor = False

        for line in block.lines:
            if line is block.anchor:
                past_anchor = True
                continue

            text = line.text.strip()
            if is_pay_scale(text):
                continue

            cleaned = remove_pay_scale(text)
            if PARENTHESIZED.match(cleaned):
                # "(Ortho)" style continuation of a designation
                if designation:
                    designation += ' ' + cleaned
                continue
            if not cleaned:
                continue

            target = names_after if past_anchor else names_before

            match = find_designation(cleaned)
            if match:
                printed, name_part, _ = match
                if not designation:
                    designation = printed
                name_bit = name_part.strip()
                if name_bit:
                    target.append(name_bit)
                continue

            if is_designation(cleaned):
                if not designation:
                    designation = cleaned
                continue

            target.append(cleaned)

        return names_before, names_after, designation

    def _split_anchor_tokens(self, tokens: List[str], kind: DocumentKind) -> Tuple[List[str], int]:
        """
        Find where identifying text ends and numeric values begin.

        Returns:
            (text tokens, index of the first value token or -1)
        """
        if kind == DocumentKind.EARNING:
            for i, token in enumerate(tokens):
                if (token in ELIGIBILITY_FLAGS and i + 1 < len(tokens)
                        and SINGLE_LETTER.match(tokens[i + 1])):
                    return tokens[:i], i + 2

        for i, token in enumerate(tokens):
            if NUMERIC_TOKEN.match(token) and not self._continues_designation(tokens, i):
                return tokens[:i], i

        return [], -1

    @staticmethod
    def _continues_designation(tokens: List[str], i: int) -> bool:
        # "Class 4" is a designation, not an amount
        return i > 0 and tokens[i - 1].lower() == 'class'
