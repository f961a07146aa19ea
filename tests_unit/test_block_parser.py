"""
Unit tests for employee block parsing.
"""

from decimal import Decimal

import pytest

from payroll.block_parser import (
    BlockParser,
    DESIGNATIONS_BY_LENGTH,
    find_designation,
    is_pay_scale,
    remove_pay_scale,
)
from payroll.exceptions import BlockParsingError
from payroll.line_reconstructor import line_text
from payroll.models import DocumentKind, EmployeeBlock, Line
from tests_unit.helpers import text_tokens


def _block(before, anchor, after=(), serial=1, identifier='00125678'):
    """Build a block from plain text lines."""
    lines = []
    y = 500.0
    for text in list(before) + [anchor] + list(after):
        tokens = text_tokens(y, text)
        lines.append(Line(y=int(y), tokens=tokens, text=line_text(tokens), page=1))
        y -= 12
    anchor_line = lines[len(before)]
    return EmployeeBlock(serial_number=serial, identifier=identifier,
                         lines=lines, anchor=anchor_line, page=1)


class TestBlockParser:
    """Test cases for BlockParser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = BlockParser()

    def test_earning_block(self):
        """Earning rows start their values after the eligibility flag and letter."""
        block = _block(['Dr. Asha'], '1 00125678 Patel Staff Nurse No A 30000 15000 5000 50000')

        parsed = self.parser.parse(block, DocumentKind.EARNING)

        assert parsed.identifier == '00125678'
        assert parsed.serial_number == 1
        assert parsed.name == 'Dr. Asha Patel'
        assert parsed.designation == 'Staff Nurse'
        assert parsed.values == [Decimal('30000'), Decimal('15000'), Decimal('5000'), Decimal('50000')]

    def test_earning_flag_excludes_numeric_text_before_flag(self):
        """Digits in the text part before the flag are not values."""
        block = _block(['Mr. Rakesh'], '2 00125679 Kumar Class-IV 4 Yes B 18000 900')

        parsed = self.parser.parse(block, DocumentKind.EARNING)

        assert parsed.values == [Decimal('18000'), Decimal('900')]
        assert parsed.designation == 'Class-IV'

    def test_class_number_is_not_a_value(self):
        """'Class 4' belongs to the designation, not the amounts."""
        block = _block(['Mr. Rakesh'], '3 00125680 Peon Class 4 1200 300')

        parsed = self.parser.parse(block, DocumentKind.DEDUCTION)

        assert parsed.values == [Decimal('1200'), Decimal('300')]
        assert parsed.designation == 'Peon'

    def test_pay_scale_lines_and_fragments_removed(self):
        """Pay-band annotations are never read as name text."""
        block = _block(['Smt. Meena 37400-67000/8700', 'PB-3 (15600-39100)/5400'],
                       '4 00125681 Desai 9000 100')

        parsed = self.parser.parse(block, DocumentKind.DEDUCTION)

        assert parsed.name == 'Smt. Meena Desai'
        assert parsed.values == [Decimal('9000'), Decimal('100')]

    def test_designation_from_continuation_line(self):
        """A designation printed below the data row is picked up."""
        block = _block(['Mr. Vijay'], '5 00125682 Rao 1000 50', ['Laboratory Technician'])

        parsed = self.parser.parse(block, DocumentKind.DEDUCTION)

        assert parsed.name == 'Mr. Vijay Rao'
        assert parsed.designation == 'Laboratory Technician'

    def test_parenthesized_designation_suffix(self):
        """'(Ortho)' style lines extend the designation."""
        block = _block(['Dr. Neha Specialist'], '6 00125683 Joshi 9000', ['(Ortho)'])

        parsed = self.parser.parse(block, DocumentKind.DEDUCTION)

        assert parsed.name == 'Dr. Neha Joshi'
        assert parsed.designation == 'Specialist (Ortho)'

    def test_name_continuation_after_anchor(self):
        """Name lines after the data row are appended in order."""
        block = _block(['Mr. Rakesh'], '2 00125679 Kumar Peon No B 20000 34000', ['Shah'])

        parsed = self.parser.parse(block, DocumentKind.EARNING)

        assert parsed.name == 'Mr. Rakesh Kumar Shah'

    def test_no_values_raises(self):
        """A data row without amounts cannot be parsed."""
        block = _block(['Mr. Rakesh'], '7 00125684 Desai')

        with pytest.raises(BlockParsingError) as exc_info:
            self.parser.parse(block, DocumentKind.DEDUCTION, source='bill.pdf')

        assert exc_info.value.details['parsing_stage'] == 'block_parsing'
        assert exc_info.value.details['line_text'] == '7 00125684 Desai'
        assert 'bill.pdf' in str(exc_info.value)

    def test_bad_prefix_raises(self):
        """An anchor without the serial/identifier prefix is rejected."""
        block = _block([], 'X 00125678 Desai 100')

        with pytest.raises(BlockParsingError):
            self.parser.parse(block, DocumentKind.DEDUCTION)


class TestVocabulary:
    """Test cases for designation and pay-scale helpers."""

    def test_longest_designation_first(self):
        assert DESIGNATIONS_BY_LENGTH[0] == 'Insurance Medical Officer'
        assert find_designation('Dr. Shah Insurance Medical Officer') == (
            'Insurance Medical Officer', 'Dr. Shah ', '')

    def test_find_designation_keeps_printed_case(self):
        assert find_designation('STAFF NURSE ward 3')[0] == 'STAFF NURSE'

    def test_find_designation_none(self):
        assert find_designation('Mr. Rakesh Kumar') is None

    def test_pay_scale_detection(self):
        assert is_pay_scale('PB-1 (5200-20200)/1800')
        assert is_pay_scale('37400-67000/8700')
        assert not is_pay_scale('Dr. Asha Patel')

    def test_remove_pay_scale(self):
        assert remove_pay_scale('Smt. Meena 37400-67000/8700') == 'Smt. Meena'
        assert remove_pay_scale('Mr. Rao 4440- ') == 'Mr. Rao'
