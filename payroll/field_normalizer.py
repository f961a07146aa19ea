"""
Field normalization: map column labels to canonical field keys.

The label table is evaluated in order, more specific patterns first (the
class-4 provident fund variant before the generic one). Labels that match
nothing still produce a key derived from the label text, so no observed
column is ever dropped.
"""

import logging
import re
from decimal import Decimal
from typing import Dict, List, NamedTuple, Pattern, Sequence, Tuple

from .models import FieldCategory, NormalizedHeader


logger = logging.getLogger(__name__)


class LabelRule(NamedTuple):
    pattern: Pattern
    canonical: str
    category: FieldCategory


def _rule(pattern: str, canonical: str, category: FieldCategory) -> LabelRule:
    return LabelRule(re.compile(pattern, re.IGNORECASE), canonical, category)


EARNING = FieldCategory.EARNING
DEDUCTION = FieldCategory.DEDUCTION

HEADER_NORMALIZATION_RULES: Tuple[LabelRule, ...] = (
    _rule(r'basic\s*pay', 'basic', EARNING),
    _rule(r'\bda\b', 'da', EARNING),
    _rule(r'\bhra\b', 'hra', EARNING),
    _rule(r'\bcla\b', 'cla', EARNING),
    _rule(r'med\s*allow', 'medAllow', EARNING),
    _rule(r'trans\s*allow', 'transAllow', EARNING),
    _rule(r'special\s*additional\s*pay', 'specialPay', EARNING),
    _rule(r'non\s*private\s*practice\s*allow', 'nppAllow', EARNING),
    _rule(r'washing\s*allow', 'washingAllow', EARNING),
    _rule(r'nursing\s*allow', 'nursingAllow', EARNING),
    _rule(r'uniform\s*allow', 'uniformAllow', EARNING),
    _rule(r'book\s*allow', 'bookAllow', EARNING),
    _rule(r'esis\s*allow', 'esisAllow', EARNING),
    _rule(r'recovery\s*of\s*pay', 'recoveryOfPay', EARNING),
    _rule(r'gross\s*amt', 'gross', EARNING),
    _rule(r'\bslo\b', 'slo', EARNING),
    _rule(r'income\s*tax', 'incomeTax', DEDUCTION),
    _rule(r'prof\s*tax', 'profTax', DEDUCTION),
    _rule(r'r\s*&\s*b', 'rnb', DEDUCTION),
    _rule(r'gpf\s*reg\s*class\s*4', 'gpfClass4', DEDUCTION),
    _rule(r'gpf\s*reg\b', 'gpfReg', DEDUCTION),
    _rule(r'nps\s*reg', 'npsReg', DEDUCTION),
    _rule(r'govt?\s*fund', 'govtFund', DEDUCTION),
    _rule(r'govt?\s*saving', 'govtSaving', DEDUCTION),
    _rule(r'total\s*ded', 'totalDed', DEDUCTION),
    _rule(r'net\s*pay', 'netPay', DEDUCTION),
)

EARNING_KEYS = tuple(r.canonical for r in HEADER_NORMALIZATION_RULES if r.category == EARNING)
DEDUCTION_KEYS = tuple(r.canonical for r in HEADER_NORMALIZATION_RULES if r.category == DEDUCTION)


def derive_fallback_key(label: str) -> str:
    """
    Derive a camelCase key from an unmapped label.

    Parenthesized codes are dropped, the first word is lower-cased and the
    following words capitalized, e.g. ``"Arrears Pay (0199)"`` -> ``"arrearsPay"``.
    """
    words = re.sub(r'\([^)]*\)', '', label).strip().split()
    key = ''.join(
        word.lower() if i == 0 else word[:1].upper() + word[1:].lower()
        for i, word in enumerate(words)
    )
    return key or 'unknown'


def normalize_label(label: str, default_category: FieldCategory = EARNING) -> NormalizedHeader:
    """
    Map one raw column label to its canonical key.

    Args:
        label: Raw column label
        default_category: Category for labels that match no rule, normally
            the kind of the document the column came from

    Returns:
        NormalizedHeader; ``matched`` is False for derived keys
    """
    for rule in HEADER_NORMALIZATION_RULES:
        if rule.pattern.search(label):
            return NormalizedHeader(raw=label, canonical=rule.canonical, category=rule.category)

    canonical = derive_fallback_key(label)
    logger.debug(f"No rule for label {label!r}; derived key {canonical!r}")
    return NormalizedHeader(raw=label, canonical=canonical, category=default_category, matched=False)


class FieldNormalizer:
    """Zip canonical keys with the positional values of a parsed employee."""

    def __init__(self, discard_unlabeled_values: bool = False):
        self.discard_unlabeled_values = discard_unlabeled_values

    def normalize_headers(self, labels: Sequence[str],
                          default_category: FieldCategory) -> List[NormalizedHeader]:
        return [normalize_label(label, default_category) for label in labels]

    def normalize(self, headers: Sequence[NormalizedHeader],
                  values: Sequence[Decimal]) -> Tuple[Dict[str, Decimal], Dict[str, FieldCategory]]:
        """
        Build the field mapping for one record.

        Missing trailing values default to zero. Values beyond the last
        column are left out of the mapping.

        Returns:
            (field key -> amount, field key -> category)
        """
        fields: Dict[str, Decimal] = {}
        categories: Dict[str, FieldCategory] = {}
        for i, header in enumerate(headers):
            fields[header.canonical] = values[i] if i < len(values) else Decimal('0')
            categories[header.canonical] = header.category
        return fields, categories

    def retained_values(self, headers: Sequence[NormalizedHeader],
                        values: Sequence[Decimal]) -> List[Decimal]:
        """Raw values to keep on the record, honoring the unlabeled-values policy."""
        if not headers and self.discard_unlabeled_values:
            return []
        return list(values)
