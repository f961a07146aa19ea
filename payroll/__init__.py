"""
Payroll Bill Extraction Module.

This module turns earning-side and deduction-side pay bill documents into
one merged, cross-validated payroll record per employee: positioned-text
line reconstruction, bill classification, header schema detection, employee
row segmentation and parsing, field normalization, merging and validation.
"""

from .pipeline import PayrollPipeline, DocumentSource, PipelinePhase
from .config import PayrollConfiguration, load_configuration
from .models import (
    PositionedToken,
    DocumentKind,
    FieldCategory,
    DocumentResult,
    PayrollRecord,
    ValidationResult,
    PayrollBatchResult,
)
from .exceptions import (
    PayrollProcessingError,
    PDFReadabilityError,
    TextExtractionError,
    DocumentClassificationError,
    BlockParsingError,
    NoConsumableDocumentsError,
    ConfigurationError,
)
from .merger import combine_record_sets, merge_payroll
from .validator import CrossValidator, validate_records
from .storage import payroll_to_storage_row, month_label_to_date

__all__ = [
    'PayrollPipeline',
    'DocumentSource',
    'PipelinePhase',
    'PayrollConfiguration',
    'load_configuration',
    'PositionedToken',
    'DocumentKind',
    'FieldCategory',
    'DocumentResult',
    'PayrollRecord',
    'ValidationResult',
    'PayrollBatchResult',
    'PayrollProcessingError',
    'PDFReadabilityError',
    'TextExtractionError',
    'DocumentClassificationError',
    'BlockParsingError',
    'NoConsumableDocumentsError',
    'ConfigurationError',
    'combine_record_sets',
    'merge_payroll',
    'CrossValidator',
    'validate_records',
    'payroll_to_storage_row',
    'month_label_to_date',
]
