"""
Cross-document merge of employee records.

Records are accumulated in identifier-keyed maps, never by re-scanning a
list. The employee identifier is the only join key between earning and
deduction documents; names and designations may disagree across sources
and the longest one seen wins.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Sequence

from .models import NormalizedRecord, PayrollRecord


logger = logging.getLogger(__name__)

GROSS_KEY = 'gross'
TOTAL_DEDUCTIONS_KEY = 'totalDed'
NET_PAY_KEY = 'netPay'


def _longer(current: str, candidate: str) -> str:
    """Longest-string-wins, keeping the first seen on ties."""
    if candidate and len(candidate) > len(current or ''):
        return candidate
    return current


def combine_record_sets(record_sets: Iterable[Sequence[NormalizedRecord]]) -> List[NormalizedRecord]:
    """
    Combine record sets of one document kind.

    Records sharing an identifier are folded together: field mappings are
    unioned (later values override earlier ones) and the longest name and
    designation are kept.

    Args:
        record_sets: One record list per document, in input order

    Returns:
        Combined records in first-seen order
    """
    combined: Dict[str, NormalizedRecord] = {}

    for records in record_sets:
        for record in records:
            existing = combined.get(record.identifier)
            if existing is None:
                combined[record.identifier] = replace(
                    record,
                    fields=dict(record.fields),
                    categories=dict(record.categories),
                    raw_values=list(record.raw_values),
                )
                continue

            existing.fields.update(record.fields)
            existing.categories.update(record.categories)
            existing.name = _longer(existing.name, record.name)
            existing.designation = _longer(existing.designation, record.designation)

    return list(combined.values())


class PayrollMerger:
    """Build one PayrollRecord per identifier across earning and deduction records."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def merge(self, earning_records: Sequence[NormalizedRecord],
              deduction_records: Sequence[NormalizedRecord]) -> List[PayrollRecord]:
        """
        Merge combined earning and deduction records.

        Earning fields are copied wholesale and a non-zero ``gross`` seeds
        the summary gross. Deduction fields are copied except ``totalDed``
        and ``netPay``, which become the summary scalars.

        Returns:
            PayrollRecords sorted ascending by identifier
        """
        payroll: Dict[str, PayrollRecord] = {}

        for record in earning_records:
            entry = self._entry_for(payroll, record)
            entry.earning.update(record.fields)
            gross = record.fields.get(GROSS_KEY)
            if gross:
                entry.gross = gross

        for record in deduction_records:
            entry = self._entry_for(payroll, record)
            fields = dict(record.fields)
            if TOTAL_DEDUCTIONS_KEY in fields:
                entry.total_deductions = fields.pop(TOTAL_DEDUCTIONS_KEY)
            if NET_PAY_KEY in fields:
                entry.net_pay = fields.pop(NET_PAY_KEY)
            entry.deduction.update(fields)

        results = sorted(payroll.values(), key=lambda r: r.identifier)
        self.logger.info(f"Merged {len(earning_records)} earning and {len(deduction_records)} "
                         f"deduction records into {len(results)} payroll records")
        return results

    def _entry_for(self, payroll: Dict[str, PayrollRecord], record: NormalizedRecord) -> PayrollRecord:
        entry = payroll.get(record.identifier)
        if entry is None:
            entry = PayrollRecord(identifier=record.identifier, name=record.name,
                                  designation=record.designation)
            payroll[record.identifier] = entry
            return entry

        entry.name = _longer(entry.name, record.name)
        entry.designation = _longer(entry.designation, record.designation)
        return entry


def merge_payroll(earning_records: Sequence[NormalizedRecord],
                  deduction_records: Sequence[NormalizedRecord]) -> List[PayrollRecord]:
    """Convenience wrapper around PayrollMerger.merge."""
    return PayrollMerger().merge(earning_records, deduction_records)
