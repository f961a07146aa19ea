"""
End-to-end tests for the payroll extraction pipeline.

Documents are fed as positioned-token pages so the full chain from line
reconstruction to cross-validation runs without PDF fixtures.
"""

import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from payroll import (
    DocumentSource,
    NoConsumableDocumentsError,
    PayrollConfiguration,
    PayrollPipeline,
)
from payroll.models import DocumentKind
from tests_unit.helpers import (
    DEDUCTION_EMPLOYEES,
    EARNING_EMPLOYEES,
    bill_page,
    deduction_page,
    earning_page,
    text_tokens,
)


def _sources():
    return [
        DocumentSource(name='earning.pdf', pages=[earning_page()]),
        DocumentSource(name='deduction.pdf', pages=[deduction_page()]),
    ]


class TestPayrollPipeline:
    """Test cases for PayrollPipeline.process_batch."""

    def setup_method(self):
        """Set up test fixtures."""
        self.pipeline = PayrollPipeline()

    def test_earning_and_deduction_bills_merged(self):
        """Both bills of a pay period produce one validated record per employee."""
        result = self.pipeline.process_batch(_sources())

        assert [record.identifier for record in result.payroll] == ['00125678', '00125679']

        asha = result.payroll[0]
        assert asha.name == 'Dr. Asha Patel'
        assert asha.designation == 'Staff Nurse'
        assert asha.earning == {
            'basic': Decimal('30000'),
            'da': Decimal('15000'),
            'hra': Decimal('5000'),
            'gross': Decimal('50000'),
        }
        assert asha.deduction == {'incomeTax': Decimal('4800'), 'profTax': Decimal('200')}
        assert asha.gross == Decimal('50000')
        assert asha.total_deductions == Decimal('5000')
        assert asha.net_pay == Decimal('45000')

        rakesh = result.payroll[1]
        assert rakesh.name == 'Mr. Rakesh Kumar Shah'
        assert rakesh.gross == Decimal('34000')
        assert rakesh.net_pay == Decimal('31000')

        assert result.validation.is_valid
        assert result.validation.errors == []
        assert result.validation.warnings == []
        assert result.validation.summary.total_net_pay == Decimal('76000')

    def test_batch_metadata(self):
        result = self.pipeline.process_batch(_sources())

        metadata = result.metadata
        assert metadata.month == 'January-2026'
        assert metadata.bill_no == '12/2026'
        assert metadata.office == 'ESIS Hospital Naroda'
        assert metadata.total_employees == 2
        assert [(f.name, f.kind, f.record_count) for f in metadata.files] == [
            ('earning.pdf', DocumentKind.EARNING, 2),
            ('deduction.pdf', DocumentKind.DEDUCTION, 2),
        ]
        assert metadata.failures == []

    def test_document_results(self):
        result = self.pipeline.process_batch(_sources())

        earning = result.documents[0]
        assert earning.schema.labels == ['Basic Pay', 'DA (0103)', 'HRA (0110)', 'Gross Amt']
        assert [h.canonical for h in earning.normalized_headers] == ['basic', 'da', 'hra', 'gross']
        assert earning.total_row.values[-1] == Decimal('84000')
        assert earning.diagnostics == []

    def test_longer_name_wins_across_documents(self):
        employees = [(['Dr. Asha R Patel'], DEDUCTION_EMPLOYEES[0][1], [])] + DEDUCTION_EMPLOYEES[1:]
        sources = [
            DocumentSource(name='earning.pdf', pages=[earning_page()]),
            DocumentSource(name='deduction.pdf', pages=[deduction_page(employees)]),
        ]

        result = self.pipeline.process_batch(sources)

        assert result.payroll[0].name == 'Dr. Asha R Patel'

    def test_input_order_does_not_change_result(self):
        forward = self.pipeline.process_batch(_sources())
        backward = self.pipeline.process_batch(list(reversed(_sources())))

        assert [r.to_dict() for r in forward.payroll] == [r.to_dict() for r in backward.payroll]

    def test_repeated_runs_are_identical(self):
        first = self.pipeline.process_batch(_sources())
        second = self.pipeline.process_batch(_sources())

        assert [r.to_dict() for r in first.payroll] == [r.to_dict() for r in second.payroll]
        assert first.validation.to_dict() == second.validation.to_dict()

    def test_net_pay_mismatch_reported(self):
        employees = [(['Dr. Asha Patel'], '1 00125678 Staff Nurse 4800 200 5000 44000', [])]
        sources = [
            DocumentSource(name='earning.pdf', pages=[earning_page(EARNING_EMPLOYEES[:1])]),
            DocumentSource(name='deduction.pdf', pages=[deduction_page(employees)]),
        ]

        result = self.pipeline.process_batch(sources)

        assert not result.validation.is_valid
        assert result.validation.errors == ['HRPN 00125678: Gross-Ded=45000 != NetPay=44000']

    def test_unclassifiable_document_is_isolated(self):
        """A bad document is recorded and the rest of the batch still merges."""
        sources = _sources() + [DocumentSource(name='letter.pdf', pages=[text_tokens(800, 'Dear Sir Regards')])]

        result = self.pipeline.process_batch(sources)

        assert len(result.payroll) == 2
        assert len(result.metadata.failures) == 1
        failure = result.metadata.failures[0]
        assert failure.name == 'letter.pdf'
        assert failure.stage == 'classification'

    def test_unreadable_pdf_is_isolated(self, tmp_path):
        sources = _sources() + [DocumentSource.from_path(tmp_path / 'missing.pdf')]

        result = self.pipeline.process_batch(sources)

        assert len(result.payroll) == 2
        assert result.metadata.failures[0].stage == 'extraction'
        assert 'PDF file not found' in result.metadata.failures[0].message

    def test_no_consumable_documents(self):
        sources = [DocumentSource(name='letter.pdf', pages=[text_tokens(800, 'Dear Sir')])]

        with pytest.raises(NoConsumableDocumentsError) as exc_info:
            self.pipeline.process_batch(sources)

        assert exc_info.value.failures[0]['stage'] == 'classification'

    def test_cancelled_batch(self):
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(NoConsumableDocumentsError) as exc_info:
            self.pipeline.process_batch(_sources(), cancel_event=cancel_event)

        assert [f['stage'] for f in exc_info.value.failures] == ['cancelled', 'cancelled']

    def test_progress_phases(self):
        phases = []

        self.pipeline.process_batch(_sources(), progress_callback=lambda phase, detail: phases.append(phase))

        for phase in ('extraction', 'classification', 'schema-detection', 'segmentation',
                      'parsing', 'merging', 'validation'):
            assert phase in phases
        assert phases[-1] == 'complete'
        assert phases.index('merging') > phases.index('parsing')

    def test_sequential_loading(self):
        pipeline = PayrollPipeline(config=PayrollConfiguration(max_workers=1))

        result = pipeline.process_batch(_sources())

        assert len(result.payroll) == 2

    def test_earning_only_batch(self):
        result = self.pipeline.process_batch([DocumentSource(name='earning.pdf', pages=[earning_page()])])

        assert result.payroll[0].deduction == {}
        assert result.payroll[0].net_pay == Decimal('0')
        assert result.validation.is_valid

    def test_to_dict(self):
        data = self.pipeline.process_batch(_sources()).to_dict()

        assert data['payroll'][0]['hrpn'] == '00125678'
        assert data['payroll'][0]['net_pay'] == 45000.0
        assert data['validation']['is_valid'] is True
        assert data['metadata']['month'] == 'January-2026'

    def test_document_records_keep_categories(self):
        result = self.pipeline.process_batch(_sources())

        earning_record = result.documents[0].records[0].to_dict()
        deduction_record = result.documents[1].records[0].to_dict()
        assert earning_record['categories']['basic'] == 'earning'
        assert deduction_record['categories']['incomeTax'] == 'deduction'
        assert deduction_record['categories']['netPay'] == 'deduction'

    def test_block_without_values_is_dropped(self):
        """One unparsable employee block is a diagnostic; the rest of the document survives."""
        employees = EARNING_EMPLOYEES + [(['Mr. Mohan'], '3 00125680 Lal Sweeper No A', [])]
        sources = [DocumentSource(name='earning.pdf', pages=[earning_page(employees)])]

        result = self.pipeline.process_batch(sources)

        document = result.documents[0]
        assert [record.identifier for record in document.records] == ['00125678', '00125679']
        assert len(document.diagnostics) == 1
        assert 'No numeric values on data line for 00125680' in document.diagnostics[0]
        assert [record.identifier for record in result.payroll] == ['00125678', '00125679']
        assert result.metadata.failures == []

    def test_cancel_during_loading_stops_extraction(self):
        """Documents not yet loaded when cancellation arrives are never extracted."""
        cancel_event = threading.Event()

        def extract(pdf_path):
            cancel_event.set()
            return [earning_page()]

        extractor = MagicMock()
        extractor.extract.side_effect = extract
        pipeline = PayrollPipeline(config=PayrollConfiguration(max_workers=1), token_extractor=extractor)
        sources = [DocumentSource.from_path(f'bill-{i}.pdf') for i in range(5)]

        with pytest.raises(NoConsumableDocumentsError) as exc_info:
            pipeline.process_batch(sources, cancel_event=cancel_event)

        assert extractor.extract.call_count == 1
        assert [f['stage'] for f in exc_info.value.failures] == ['cancelled'] * 5

    def test_progress_reported_from_calling_thread(self):
        caller = threading.get_ident()
        threads = set()

        self.pipeline.process_batch(_sources(), progress_callback=lambda phase, detail: threads.add(
            threading.get_ident()))

        assert threads == {caller}


class TestUnlabeledValues:
    """Documents without a recognizable header row."""

    def _headerless_source(self):
        page = bill_page('Earning Side', [], EARNING_EMPLOYEES)
        return DocumentSource(name='earning.pdf', pages=[page])

    def test_values_kept_by_default(self):
        result = PayrollPipeline().process_batch([self._headerless_source()])

        document = result.documents[0]
        assert not document.schema.is_valid
        assert document.diagnostics == ['earning.pdf: no header columns detected; values are unlabeled']
        assert document.records[0].fields == {}
        assert document.records[0].raw_values == [
            Decimal('30000'), Decimal('15000'), Decimal('5000'), Decimal('50000')]

    def test_values_discarded_when_configured(self):
        config = PayrollConfiguration(discard_unlabeled_values=True)

        result = PayrollPipeline(config=config).process_batch([self._headerless_source()])

        assert result.documents[0].records[0].raw_values == []
