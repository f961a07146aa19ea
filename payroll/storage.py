"""
Shaping merged payroll records into rows for the downstream store.

The store itself lives outside this package; these helpers only define
the stable column set built from the canonical field keys.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from .models import PayrollRecord


MONTHS = {
    'january': '01', 'february': '02', 'march': '03', 'april': '04',
    'may': '05', 'june': '06', 'july': '07', 'august': '08',
    'september': '09', 'october': '10', 'november': '11', 'december': '12',
}

# storage column -> canonical key(s), first present key wins
EARNING_COLUMNS = {
    'basic': ('basic',),
    'da': ('da',),
    'hra': ('hra',),
    'cla': ('cla',),
    'med_allow': ('medAllow',),
    'trans_allow': ('transAllow',),
    'book_allow': ('bookAllow',),
    'npp_allow': ('nppAllow', 'nppallow'),
    'esis_allow': ('esisAllow',),
    'special_pay': ('specialPay',),
    'washing_allow': ('washingAllow',),
    'nursing_allow': ('nursingAllow',),
    'uniform_allow': ('uniformAllow',),
    'recovery_of_pay': ('recoveryOfPay',),
    'slo': ('slo',),
}

DEDUCTION_COLUMNS = {
    'income_tax': ('incomeTax',),
    'prof_tax': ('profTax',),
    'gpf_reg': ('gpfReg',),
    'gpf_class4': ('gpfClass4',),
    'nps_reg': ('npsReg',),
    'rnb': ('rnb',),
    'govt_fund': ('govtFund',),
    'govt_saving': ('govtSaving',),
}


def _first_amount(fields: Mapping[str, Decimal], keys: Sequence[str]) -> float:
    for key in keys:
        if fields.get(key):
            return float(fields[key])
    return 0.0


def month_label_to_date(month_label: str) -> str:
    """
    Convert a bill month label to the first day of that month.

    ``"January-2026"`` becomes ``"2026-01-01"``. Unknown month names map to
    ``01``; labels that are not ``<Month>-<Year>`` are returned unchanged.
    """
    parts = month_label.split('-')
    if len(parts) == 2:
        month = MONTHS.get(parts[0].lower(), '01')
        return f"{parts[1]}-{month}-01"
    return month_label


def payroll_to_storage_row(record: PayrollRecord, month_date: str, month_year: str,
                           source_files: Sequence[str], bill_no: Optional[str] = None,
                           office: Optional[str] = None) -> Dict[str, Any]:
    """
    Flatten a merged record into one storage row.

    Args:
        record: Merged payroll record
        month_date: First day of the pay month (``YYYY-MM-01``)
        month_year: Month label as printed on the bill
        source_files: Names of the documents the record came from
        bill_no: Bill number, if detected
        office: Office name, if detected

    Returns:
        Dictionary keyed by storage column; missing amounts are 0
    """
    row: Dict[str, Any] = {
        'hrpn': record.identifier,
        'name': record.name,
        'designation': record.designation or None,
        'month_year': month_year,
        'month_date': month_date,
    }

    for column, keys in EARNING_COLUMNS.items():
        row[column] = _first_amount(record.earning, keys)
    for column, keys in DEDUCTION_COLUMNS.items():
        row[column] = _first_amount(record.deduction, keys)

    row.update({
        'gross': float(record.gross or 0),
        'total_ded': float(record.total_deductions or 0),
        'net_pay': float(record.net_pay or 0),
        'source_files': list(source_files),
        'bill_no': bill_no or None,
        'office': office or None,
    })
    return row
