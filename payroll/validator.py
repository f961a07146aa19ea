"""
Cross-validation of merged payroll records.

Checks, per record:
- earning fields (except the gross and SLO pseudo-fields) add up to gross
  (warning on mismatch, these are common with rounding or unmapped columns)
- gross minus total deductions equals net pay (error on mismatch)
- the identifier is exactly 8 digits (error otherwise)

and aggregates batch totals plus the field keys observed per category.
"""

import logging
import re
from decimal import Decimal
from typing import Optional, Sequence

from .models import PayrollRecord, RecordValidation, ValidationResult, ValidationSummary


logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r'^\d{8}$')
EXCLUDED_FROM_EARNING_SUM = frozenset({'gross', 'slo'})
DEFAULT_TOLERANCE = Decimal('1.00')


def _fmt(amount: Decimal) -> str:
    return f"{amount:.2f}"


class CrossValidator:
    """Arithmetic and structural checks over a merged record set."""

    def __init__(self, tolerance: Decimal = DEFAULT_TOLERANCE, logger: Optional[logging.Logger] = None):
        self.tolerance = tolerance
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def validate_record(self, record: PayrollRecord) -> RecordValidation:
        """
        Validate a single merged record.

        Args:
            record: Merged payroll record

        Returns:
            RecordValidation with error and warning strings
        """
        result = RecordValidation(identifier=record.identifier)

        if record.gross > 0 and record.earning:
            earning_sum = sum(
                (value for key, value in record.earning.items() if key not in EXCLUDED_FROM_EARNING_SUM),
                Decimal('0'),
            )
            if abs(earning_sum - record.gross) > self.tolerance:
                result.warnings.append(
                    f"HRPN {record.identifier}: Earning sum ({_fmt(earning_sum)}) "
                    f"!= Gross ({_fmt(record.gross)})"
                )

        if record.gross > 0 and record.total_deductions > 0 and record.net_pay > 0:
            computed_net = record.gross - record.total_deductions
            if abs(computed_net - record.net_pay) > self.tolerance:
                result.errors.append(
                    f"HRPN {record.identifier}: Gross-Ded={computed_net} != NetPay={record.net_pay}"
                )

        if not record.identifier or not IDENTIFIER_PATTERN.match(record.identifier):
            result.errors.append(f'Invalid HRPN: "{record.identifier}"')

        return result

    def validate(self, records: Sequence[PayrollRecord]) -> ValidationResult:
        """
        Validate a merged record set.

        Args:
            records: Merged payroll records

        Returns:
            ValidationResult with per-record problems and batch summary
        """
        result = ValidationResult(total_records=len(records))
        earning_keys = set()
        deduction_keys = set()

        for record in records:
            record_result = self.validate_record(record)
            result.record_results[record.identifier] = record_result
            if record_result.is_valid:
                result.valid_records += 1
            result.errors.extend(record_result.errors)
            result.warnings.extend(record_result.warnings)
            earning_keys.update(record.earning)
            deduction_keys.update(record.deduction)

        result.is_valid = not result.errors
        result.summary = ValidationSummary(
            total_employees=len(records),
            total_gross=sum((r.gross for r in records), Decimal('0')),
            total_deductions=sum((r.total_deductions for r in records), Decimal('0')),
            total_net_pay=sum((r.net_pay for r in records), Decimal('0')),
            earning_fields_found=sorted(earning_keys),
            deduction_fields_found=sorted(deduction_keys),
        )

        self.logger.info(f"Validated {len(records)} records: {result.valid_records} valid, "
                         f"{len(result.errors)} errors, {len(result.warnings)} warnings")
        return result


def validate_records(records: Sequence[PayrollRecord],
                     tolerance: Decimal = DEFAULT_TOLERANCE) -> ValidationResult:
    """Convenience wrapper around CrossValidator.validate."""
    return CrossValidator(tolerance=tolerance).validate(records)
