"""
Header/column schema detection for payroll bills.

This module implements the Strategy pattern for header detection: each
expected financial field of a bill kind is a FieldDetector that searches
the header-token pool and reports the x position where its column starts.
Resolved columns sorted by x define how the trailing numeric values of
every data line are assigned to fields.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from .models import ColumnSchema, DocumentKind, HeaderToken, Line, SchemaColumn


logger = logging.getLogger(__name__)

CONTACT_LINE = re.compile(r'phone|mobile', re.IGNORECASE)
DATA_ROW_PREFIX = re.compile(r'^\d+\s+\d{8}')
HONORIFIC_PREFIX = re.compile(r'^(Mr\.|Mrs\.|Miss\.|Ms\.|Dr\.|Shri\.|Smt\.)', re.IGNORECASE)


def is_name_prefix(text: str) -> bool:
    """True when text starts with an honorific such as ``Dr.`` or ``Smt.``."""
    return bool(HONORIFIC_PREFIX.match(text.strip()))


def find_token(tokens: Sequence[HeaderToken], pattern: str) -> Optional[HeaderToken]:
    """Return the first header token whose text matches pattern."""
    regex = re.compile(pattern, re.IGNORECASE)
    for token in tokens:
        if regex.search(token.text):
            return token
    return None


class FieldDetector(ABC):
    """
    Abstract base class for header field detectors.

    A detector knows the label of one catalogue field and how to locate it
    in the header-token pool.
    """

    def __init__(self, label: str):
        self.label = label

    @abstractmethod
    def detect(self, tokens: Sequence[HeaderToken], header_text: str) -> Optional[float]:
        """
        Locate the field in the header zone.

        Args:
            tokens: Header-token pool in reading order
            header_text: Header-zone tokens joined by spaces

        Returns:
            x position of the column, or None if the field is absent
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.label!r})"


class KeywordDetector(FieldDetector):
    """
    Primary keyword first, then a numeric field-code token.

    Patterns are tried in order; the first pattern that matches any token
    wins, so a keyword always takes priority over a field code.
    """

    def __init__(self, label: str, *patterns: str):
        super().__init__(label)
        self.patterns: Tuple[str, ...] = patterns

    def detect(self, tokens, header_text):
        for pattern in self.patterns:
            token = find_token(tokens, pattern)
            if token:
                return token.x
        return None


class AdjacentKeywordsDetector(FieldDetector):
    """Two keyword tokens that together name one column; the leftmost wins."""

    def __init__(self, label: str, first: str, second: str, fallback: KeywordDetector):
        super().__init__(label)
        self.first = first
        self.second = second
        self.fallback = fallback

    def detect(self, tokens, header_text):
        first = find_token(tokens, self.first)
        second = find_token(tokens, self.second)
        if first and second:
            return min(first.x, second.x)
        return self.fallback.detect(tokens, header_text)


class PresenceDetector(FieldDetector):
    """
    Keyword tokens, else presence in the header text.

    Some bills print a column heading across several runs so that no single
    token can be isolated. When the header text still proves the column
    exists, the code token's position is used if present, otherwise a
    fixed fallback position.
    """

    def __init__(self, label: str, token_patterns: Sequence[str],
                 presence_patterns: Sequence[str], code_pattern: str,
                 fallback_x: float):
        super().__init__(label)
        self.token_patterns = tuple(token_patterns)
        self.presence_patterns = tuple(presence_patterns)
        self.code_pattern = code_pattern
        self.fallback_x = fallback_x

    def detect(self, tokens, header_text):
        for pattern in self.token_patterns:
            token = find_token(tokens, pattern)
            if token:
                return token.x

        if any(re.search(p, header_text, re.IGNORECASE) for p in self.presence_patterns):
            code = find_token(tokens, self.code_pattern)
            return code.x if code else self.fallback_x
        return None


class GatedDetector(FieldDetector):
    """Only searches tokens when the header text contains the full phrase or code."""

    def __init__(self, label: str, gate_patterns: Sequence[str], token_patterns: Sequence[str]):
        super().__init__(label)
        self.gate_patterns = tuple(gate_patterns)
        self.token_patterns = tuple(token_patterns)

    def detect(self, tokens, header_text):
        if not any(re.search(p, header_text, re.IGNORECASE) for p in self.gate_patterns):
            return None
        for pattern in self.token_patterns:
            token = find_token(tokens, pattern)
            if token:
                return token.x
        return None


def earning_detectors(presence_fallback_x: float = 500) -> List[FieldDetector]:
    """Catalogue of earning-side columns, in catalogue order."""
    return [
        KeywordDetector('Basic Pay', r'Basic'),
        KeywordDetector('DA (0103)', r'DA', r'0103'),
        KeywordDetector('HRA (0110)', r'HRA', r'0110'),
        KeywordDetector('CLA (0111)', r'CLA', r'0111'),
        KeywordDetector('Med Allow', r'Med', r'0107'),
        KeywordDetector('Trans Allow', r'Trans', r'0113'),
        AdjacentKeywordsDetector('Special Additional Pay', r'^Special$', r'^Additional$',
                                 KeywordDetector('Special Additional Pay', r'Special')),
        PresenceDetector('Non Private Practice Allow',
                         token_patterns=[r'^Non\s*Private$', r'Practice'],
                         presence_patterns=[r'Non\s*Private', r'Practice\s*Allow', r'\(0128\)'],
                         code_pattern=r'0128',
                         fallback_x=presence_fallback_x),
        KeywordDetector('Washing Allow', r'Washing', r'0132'),
        KeywordDetector('Nursing Allow', r'Nursing', r'0129'),
        KeywordDetector('Uniform Allow', r'Uniform', r'0131'),
        KeywordDetector('Book Allow', r'Book', r'0104'),
        KeywordDetector('ESIS Allow', r'ESIS', r'0127'),
        KeywordDetector('Recovery of Pay', r'^Recovery$', r'Recovery'),
        KeywordDetector('Gross Amt', r'Gross'),
        KeywordDetector('SLO', r'^SLO$'),
    ]


def deduction_detectors() -> List[FieldDetector]:
    """Catalogue of deduction-side columns, in catalogue order."""
    return [
        KeywordDetector('Income Tax', r'Income', r'9510'),
        KeywordDetector('Prof Tax', r'Prof', r'9570'),
        KeywordDetector('R&B', r'R&B', r'9550'),
        KeywordDetector('GPF Reg Class 4', r'Class', r'9531'),
        GatedDetector('GPF Reg', [r'GPF\s*Reg', r'9670'], [r'GPF', r'9670']),
        KeywordDetector('NPS Reg', r'NPS', r'9534'),
        GatedDetector('Govt Fund', [r'Govt\s*Fund', r'9581'], [r'Fund', r'9581']),
        GatedDetector('Govt Saving', [r'Govt\s*Saving', r'9582'], [r'Saving', r'9582']),
        KeywordDetector('Total Ded', r'Total\s*Ded'),
        KeywordDetector('Net Pay', r'Net\s*Pay'),
    ]


class SchemaDetector:
    """
    Resolve the column schema of a document from its first page.

    The header zone begins after the contact-info line and ends at the
    first data row or name line. Catalogue entries that cannot be located
    are omitted, so the schema is sparse.
    """

    def __init__(self, presence_fallback_x: float = 500, logger: Optional[logging.Logger] = None):
        self.presence_fallback_x = presence_fallback_x
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def detectors_for(self, kind: DocumentKind) -> List[FieldDetector]:
        if kind == DocumentKind.EARNING:
            return earning_detectors(self.presence_fallback_x)
        return deduction_detectors()

    def collect_header_tokens(self, page_lines: Sequence[Line]) -> List[HeaderToken]:
        """Gather every token between the contact-info line and the first data/name line."""
        header_tokens: List[HeaderToken] = []
        in_header_zone = False

        for line in page_lines:
            if CONTACT_LINE.search(line.text):
                in_header_zone = True
                continue

            if in_header_zone:
                if DATA_ROW_PREFIX.match(line.text) or is_name_prefix(line.text):
                    break
                for token in line.tokens:
                    header_tokens.append(HeaderToken(x=token.x, text=token.text.strip(),
                                                     y=line.y, width=token.width))

        return header_tokens

    def detect(self, page_lines: Sequence[Line], kind: DocumentKind) -> ColumnSchema:
        """
        Build the column schema for a document.

        Args:
            page_lines: Lines of the first page
            kind: Document kind selecting the detector catalogue

        Returns:
            ColumnSchema; ``is_valid`` is False for an empty header zone
        """
        header_tokens = self.collect_header_tokens(page_lines)
        if not header_tokens:
            self.logger.warning("Header zone is empty; no columns detected")
            return ColumnSchema(columns=[], is_valid=False, raw_header_text='')

        header_text = ' '.join(token.text for token in header_tokens)
        columns: List[SchemaColumn] = []

        for detector in self.detectors_for(kind):
            x = detector.detect(header_tokens, header_text)
            if x is not None:
                columns.append(SchemaColumn(label=detector.label, x=x))
            else:
                self.logger.debug(f"Header field not found: {detector.label}")

        # Stable sort keeps catalogue order for columns sharing an x
        columns.sort(key=lambda column: column.x)

        self.logger.info(f"Resolved {len(columns)} {kind.value} columns: "
                         f"{[column.label for column in columns]}")
        return ColumnSchema(columns=columns, is_valid=bool(columns), raw_header_text=header_text)
