"""
Unit tests for document classification.
"""

import pytest

from payroll.classifier import DocumentClassifier
from payroll.exceptions import DocumentClassificationError
from payroll.models import DocumentKind


class TestDocumentClassifier:
    """Test cases for DocumentClassifier."""

    def setup_method(self):
        """Set up test fixtures."""
        self.classifier = DocumentClassifier()

    def test_earning_side(self):
        """Earning-side marker is detected case-insensitively."""
        meta = self.classifier.classify("PAYBILL EARNING SIDE\nMonth of : January-2026")

        assert meta.kind == DocumentKind.EARNING
        assert meta.month == 'January-2026'

    def test_deduction_side(self):
        """Deduction-side marker is detected."""
        meta = self.classifier.classify("Inner Sheet\nDeduction Side")

        assert meta.kind == DocumentKind.DEDUCTION

    def test_earning_checked_first(self):
        """A document mentioning both sides is earning-side."""
        meta = self.classifier.classify("Earning Side\nsee also Deduction Side")

        assert meta.kind == DocumentKind.EARNING

    def test_no_marker_raises(self):
        """Documents without a marker cannot be classified."""
        with pytest.raises(DocumentClassificationError) as exc_info:
            self.classifier.classify("Quarterly attendance register", source='register.pdf')

        error = exc_info.value
        assert error.details['parsing_stage'] == 'classification'
        assert error.details['text_sample'] == "Quarterly attendance register"
        assert "register.pdf" in str(error)

    def test_metadata_extraction(self):
        """Month, bill number and office are picked up when present."""
        text = (
            "PAYBILL Earning Side\n"
            "Month of : March-2026 Bill No. : 45/2026\n"
            "Name of Office : ESIS Hospital Naroda\n"
        )

        meta = self.classifier.classify(text)

        assert meta.month == 'March-2026'
        assert meta.bill_no == '45/2026'
        assert meta.office == 'ESIS Hospital Naroda'

    def test_office_stops_before_bill_number(self):
        """Office name ends where the bill number starts on the same line."""
        meta = self.classifier.classify("Deduction Side\nName of Office : ESIS Dispensary Bill No. : 7")

        assert meta.office == 'ESIS Dispensary'
        assert meta.bill_no == '7'

    def test_missing_metadata_is_none(self):
        """Absent metadata fields are None, not errors."""
        meta = self.classifier.classify("Earning Side")

        assert meta.month is None
        assert meta.bill_no is None
        assert meta.office is None
        assert meta.to_dict() == {'type': 'earning', 'month': None, 'bill_no': None, 'office': None}
