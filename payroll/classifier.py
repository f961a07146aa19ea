"""
Document classification and bill metadata extraction.
"""

import logging
import re
from typing import List, Optional

from .exceptions import DocumentClassificationError
from .models import DocumentKind, DocumentMeta


logger = logging.getLogger(__name__)


class DocumentClassifier:
    """
    Decide whether a bill is earning-side or deduction-side and pick up
    its month label, bill number and office name.
    """

    EARNING_MARKER = 'earning side'
    DEDUCTION_MARKER = 'deduction side'

    MONTH_PATTERNS = [
        r'Month\s+of\s*:\s*([A-Za-z]+-\d{4})',
    ]

    BILL_NUMBER_PATTERNS = [
        r'Bill\s+No\.\s*:\s*(\S+)',
    ]

    OFFICE_PATTERNS = [
        r'Name\s+of\s+Office\s*:\s*(.+?)(?:\s*Bill\s+No|$)',
    ]

    def classify(self, raw_text: str, source: Optional[str] = None) -> DocumentMeta:
        """
        Classify a document from its reconstructed text.

        Args:
            raw_text: Newline-joined document text
            source: Document name used in error messages

        Returns:
            DocumentMeta with kind and any metadata found

        Raises:
            DocumentClassificationError: If neither marker is present
        """
        kind = self.detect_kind(raw_text, source)

        meta = DocumentMeta(
            kind=kind,
            month=self._extract_with_patterns(raw_text, self.MONTH_PATTERNS),
            bill_no=self._extract_with_patterns(raw_text, self.BILL_NUMBER_PATTERNS),
            office=self._extract_with_patterns(raw_text, self.OFFICE_PATTERNS),
        )
        logger.info(f"Classified {source or 'document'} as {kind.value} "
                    f"(month={meta.month}, bill={meta.bill_no})")
        return meta

    def detect_kind(self, raw_text: str, source: Optional[str] = None) -> DocumentKind:
        text = raw_text.lower()
        if self.EARNING_MARKER in text:
            return DocumentKind.EARNING
        if self.DEDUCTION_MARKER in text:
            return DocumentKind.DEDUCTION
        raise DocumentClassificationError(
            'Cannot detect document type: neither "Earning Side" nor "Deduction Side" found',
            source=source,
            extracted_text=raw_text,
        )

    def _extract_with_patterns(self, text: str, patterns: List[str]) -> Optional[str]:
        """Return the first group of the first pattern that matches."""
        for pattern in patterns:
            match = re.search(pattern, text, re.IGNORECASE | re.MULTILINE)
            if match:
                value = match.group(1).strip()
                if value:
                    return value
        return None
