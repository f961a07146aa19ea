"""
Unit tests for cross-document merging.
"""

from decimal import Decimal

from payroll.merger import PayrollMerger, combine_record_sets, merge_payroll
from payroll.models import FieldCategory, NormalizedRecord


def _record(identifier, name='', designation='', **fields):
    return NormalizedRecord(
        identifier=identifier,
        name=name,
        designation=designation,
        fields={key: Decimal(str(value)) for key, value in fields.items()},
    )


class TestCombineRecordSets:
    """Test cases for within-kind combination."""

    def test_records_with_same_identifier_are_folded(self):
        """Fields union, later values win, longest name is kept."""
        first = [_record('00125678', 'Asha Patel', basic=30000, da=15000)]
        second = [_record('00125678', 'Dr. Asha Patel', 'Staff Nurse', da=16000, hra=5000)]

        combined = combine_record_sets([first, second])

        assert len(combined) == 1
        record = combined[0]
        assert record.name == 'Dr. Asha Patel'
        assert record.designation == 'Staff Nurse'
        assert record.fields == {'basic': Decimal('30000'), 'da': Decimal('16000'), 'hra': Decimal('5000')}

    def test_inputs_are_not_mutated(self):
        original = _record('00125678', 'Asha', basic=1)

        combine_record_sets([[original], [_record('00125678', 'Asha Patel', da=2)]])

        assert original.fields == {'basic': Decimal('1')}
        assert original.name == 'Asha'

    def test_first_seen_order(self):
        combined = combine_record_sets([[_record('00000002'), _record('00000001')], [_record('00000003')]])

        assert [r.identifier for r in combined] == ['00000002', '00000001', '00000003']

    def test_equal_length_names_keep_first(self):
        combined = combine_record_sets([[_record('00000001', 'Asha')], [_record('00000001', 'Usha')]])

        assert combined[0].name == 'Asha'


class TestPayrollMerger:
    """Test cases for PayrollMerger."""

    def setup_method(self):
        """Set up test fixtures."""
        self.merger = PayrollMerger()

    def test_earning_and_deduction_merged(self):
        """One record carries the gross, total deductions, net pay and both maps."""
        earning = [_record('00125678', 'Dr. Asha Patel', basic=30000, da=15000, hra=5000, gross=50000)]
        deduction = [_record('00125678', 'Asha Patel', incomeTax=4800, profTax=200, totalDed=5000, netPay=45000)]

        payroll = self.merger.merge(earning, deduction)

        assert len(payroll) == 1
        record = payroll[0]
        assert record.gross == Decimal('50000')
        assert record.total_deductions == Decimal('5000')
        assert record.net_pay == Decimal('45000')
        assert record.earning['basic'] == Decimal('30000')
        assert record.deduction == {'incomeTax': Decimal('4800'), 'profTax': Decimal('200')}
        assert record.name == 'Dr. Asha Patel'

    def test_zero_gross_does_not_seed_summary(self):
        payroll = self.merger.merge([_record('00000001', gross=0, basic=100)], [])

        assert payroll[0].gross == Decimal('0')
        assert payroll[0].earning['gross'] == Decimal('0')

    def test_deduction_only_record(self):
        payroll = self.merger.merge([], [_record('00000009', 'Meena', netPay=100, totalDed=0)])

        assert payroll[0].earning == {}
        assert payroll[0].net_pay == Decimal('100')
        assert payroll[0].total_deductions == Decimal('0')
        assert payroll[0].deduction == {}

    def test_sorted_by_identifier(self):
        payroll = merge_payroll(
            [_record('00125679'), _record('00000001')],
            [_record('00125678')],
        )

        assert [r.identifier for r in payroll] == ['00000001', '00125678', '00125679']

    def test_longest_designation_wins(self):
        payroll = self.merger.merge(
            [_record('00000001', designation='Nurse')],
            [_record('00000001', designation='Staff Nurse')],
        )

        assert payroll[0].designation == 'Staff Nurse'

    def test_to_dict(self):
        payroll = self.merger.merge([_record('00000001', 'A', gross=10)], [_record('00000001', netPay=10)])

        data = payroll[0].to_dict()

        assert data['hrpn'] == '00000001'
        assert data['gross'] == 10.0
        assert data['net_pay'] == 10.0
        assert data['earning'] == {'gross': 10.0}

    def test_categories_copied_on_combine(self):
        record = _record('00000001', basic=1)
        record.categories = {'basic': FieldCategory.EARNING}

        combined = combine_record_sets([[record]])

        assert combined[0].categories == {'basic': FieldCategory.EARNING}
        assert combined[0].categories is not record.categories
