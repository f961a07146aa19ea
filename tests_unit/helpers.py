"""
Synthetic pay bill pages for tests.

Pages are lists of PositionedTokens laid out the way the bill generator
prints them: office banner, bill metadata, the contact line, one header
row, then employee blocks (name line above the data row, optional
continuation below) and a closing total row.
"""

from typing import List, Sequence, Tuple

from payroll.models import PositionedToken


Employee = Tuple[Sequence[str], str, Sequence[str]]

EARNING_HEADERS = [(200.0, 'Basic Pay'), (260.0, 'DA (0103)'), (320.0, 'HRA (0110)'), (380.0, 'Gross Amt')]
DEDUCTION_HEADERS = [(200.0, 'Income Tax (9510)'), (260.0, 'Prof Tax'), (320.0, 'Total Ded'), (380.0, 'Net Pay')]

EARNING_EMPLOYEES: List[Employee] = [
    (['Dr. Asha'], '1 00125678 Patel Staff Nurse No A 30000 15000 5000 50000', []),
    (['Mr. Rakesh'], '2 00125679 Kumar Peon No B 20000 10000 4000 34000', ['Shah']),
]

DEDUCTION_EMPLOYEES: List[Employee] = [
    (['Dr. Asha Patel'], '1 00125678 Staff Nurse 4800 200 5000 45000', []),
    (['Mr. Rakesh Kumar Shah'], '2 00125679 Peon 2800 200 3000 31000', []),
]


def text_tokens(y: float, text: str, x0: float = 40.0, step: float = 40.0) -> List[PositionedToken]:
    """One token per whitespace-separated word, left to right."""
    return [PositionedToken(text=word, x=x0 + i * step, y=y, width=step - 5)
            for i, word in enumerate(text.split())]


def header_tokens(y: float, columns: Sequence[Tuple[float, str]]) -> List[PositionedToken]:
    """Header runs keep their inner spaces, as with keep_blank_chars extraction."""
    return [PositionedToken(text=label, x=x, y=y, width=50.0) for x, label in columns]


def bill_page(side: str, headers: Sequence[Tuple[float, str]], employees: Sequence[Employee],
              month: str = 'January-2026', bill_no: str = '12/2026',
              total: str = '') -> List[PositionedToken]:
    """
    Build one bill page.

    Args:
        side: ``"Earning Side"`` or ``"Deduction Side"``
        headers: (x, label) header runs
        employees: (lines above, data row, lines below) per employee
        month: Month label printed after ``Month of :``
        bill_no: Bill number printed after ``Bill No. :``
        total: Optional total row text
    """
    y = 800.0
    tokens: List[PositionedToken] = []

    def add_text(text: str) -> None:
        nonlocal y
        tokens.extend(text_tokens(y, text))
        y -= 12

    add_text('ESIS General Hospital Naroda')
    add_text(f'PAYBILL {side}')
    add_text(f'Month of : {month} Bill No. : {bill_no}')
    add_text('Name of Office : ESIS Hospital Naroda')
    add_text('Phone no : 079-22820000')

    tokens.extend(header_tokens(y, headers))
    y -= 12

    for before, anchor, after in employees:
        for text in before:
            add_text(text)
        add_text(anchor)
        for text in after:
            add_text(text)

    if total:
        add_text(total)

    return tokens


def earning_page(employees: Sequence[Employee] = EARNING_EMPLOYEES, **kwargs) -> List[PositionedToken]:
    kwargs.setdefault('total', 'Total 50000 25000 9000 84000')
    return bill_page('Earning Side', EARNING_HEADERS, employees, **kwargs)


def deduction_page(employees: Sequence[Employee] = DEDUCTION_EMPLOYEES, **kwargs) -> List[PositionedToken]:
    kwargs.setdefault('total', 'Total 7600 400 8000 76000')
    return bill_page('Deduction Side', DEDUCTION_HEADERS, employees, **kwargs)
