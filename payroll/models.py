"""
Data models for payroll bill extraction.

This module defines the data structures that flow through the extraction
pipeline: positioned tokens and reconstructed lines, document metadata,
column schemas, employee blocks, parsed and normalized records, merged
payroll records and validation results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Dict, Any


def _money(value: Optional[Decimal]) -> Optional[float]:
    """Render a Decimal amount as a JSON-safe float."""
    return float(value) if value is not None else None


class DocumentKind(str, Enum):
    EARNING = "earning"
    DEDUCTION = "deduction"


class FieldCategory(str, Enum):
    EARNING = "earning"
    DEDUCTION = "deduction"


@dataclass(frozen=True)
class PositionedToken:
    """
    A text fragment produced by the external text extractor.

    Attributes:
        text: Text of the fragment
        x: Horizontal position of the fragment origin
        y: Vertical position of the fragment origin (PDF user space, grows upward)
        width: Rendered width of the fragment
    """
    text: str
    x: float
    y: float
    width: float = 0.0


@dataclass
class Line:
    """
    Tokens sharing one vertical bucket, ordered left to right.

    Attributes:
        y: Integer vertical bucket shared by all tokens
        tokens: Tokens on the line, ascending by x
        text: Concatenated token text
        page: Owning page number (1-based)
    """
    y: int
    tokens: List[PositionedToken] = field(default_factory=list)
    text: str = ""
    page: int = 1


@dataclass
class PageLines:
    """Reading-order lines of one page."""
    page_number: int
    lines: List[Line] = field(default_factory=list)


@dataclass
class ExtractedText:
    """
    Output of line reconstruction for a whole document.

    Attributes:
        pages: Per-page ordered line lists
        raw_text: All line texts joined by newlines
        full_lines: Flattened line texts across page boundaries
    """
    pages: List[PageLines] = field(default_factory=list)
    raw_text: str = ""
    full_lines: List[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def all_tokens(self) -> List[PositionedToken]:
        """Re-flatten every token of every line."""
        return [token for page in self.pages for line in page.lines for token in line.tokens]


@dataclass
class DocumentMeta:
    """Document kind plus best-effort bill metadata."""
    kind: DocumentKind
    month: Optional[str] = None
    bill_no: Optional[str] = None
    office: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind.value,
            'month': self.month,
            'bill_no': self.bill_no,
            'office': self.office,
        }


@dataclass
class HeaderToken:
    """A token from the header zone, with the line it came from."""
    x: float
    text: str
    y: int = 0
    width: float = 0.0


@dataclass
class SchemaColumn:
    """One resolved header column."""
    label: str
    x: float


@dataclass
class ColumnSchema:
    """
    Ordered header columns of one document.

    Attributes:
        columns: Resolved columns, ascending by x
        is_valid: False when the header zone was empty or nothing resolved
        raw_header_text: Header-zone tokens joined by spaces
    """
    columns: List[SchemaColumn] = field(default_factory=list)
    is_valid: bool = False
    raw_header_text: str = ""

    @property
    def labels(self) -> List[str]:
        return [column.label for column in self.columns]


@dataclass
class TotalRow:
    """The running total row printed at the end of a bill."""
    raw_text: str
    page: int
    values: List[Decimal] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'raw_text': self.raw_text,
            'page': self.page,
            'values': [float(v) for v in self.values],
        }


@dataclass
class EmployeeBlock:
    """
    The bounded group of lines describing one employee.

    Attributes:
        serial_number: Serial number printed before the identifier
        identifier: 8-digit employee identifier
        lines: Block lines in document order, anchor included
        anchor: The data line carrying the numeric values
        page: Page number of the anchor
    """
    serial_number: int
    identifier: str
    lines: List[Line]
    anchor: Line
    page: int


@dataclass
class ParsedEmployee:
    """Identity and positional numeric values parsed from one block."""
    serial_number: int
    identifier: str
    name: str
    designation: str = ""
    values: List[Decimal] = field(default_factory=list)


@dataclass
class NormalizedHeader:
    """A raw column label and the canonical key it maps to."""
    raw: str
    canonical: str
    category: FieldCategory
    matched: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'raw': self.raw,
            'canonical': self.canonical,
            'category': self.category.value,
            'matched': self.matched,
        }


@dataclass
class NormalizedRecord:
    """
    One employee's record from a single document.

    Attributes:
        identifier: 8-digit employee identifier
        name: Assembled full name
        designation: Matched designation or empty string
        fields: Canonical field key -> amount
        categories: Canonical field key -> category
        raw_values: Positional values before labelling
        serial_number: Serial number in the source document
        page: Page number of the anchor line
    """
    identifier: str
    name: str
    designation: str = ""
    fields: Dict[str, Decimal] = field(default_factory=dict)
    categories: Dict[str, FieldCategory] = field(default_factory=dict)
    raw_values: List[Decimal] = field(default_factory=list)
    serial_number: Optional[int] = None
    page: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hrpn': self.identifier,
            'name': self.name,
            'designation': self.designation,
            'fields': {key: float(value) for key, value in self.fields.items()},
            'categories': {key: category.value for key, category in self.categories.items()},
            'raw_values': [float(v) for v in self.raw_values],
        }


@dataclass
class DocumentResult:
    """Everything extracted from one source document."""
    name: str
    meta: DocumentMeta
    records: List[NormalizedRecord] = field(default_factory=list)
    total_row: Optional[TotalRow] = None
    schema: ColumnSchema = field(default_factory=ColumnSchema)
    normalized_headers: List[NormalizedHeader] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def kind(self) -> DocumentKind:
        return self.meta.kind

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'meta': self.meta.to_dict(),
            'records': [record.to_dict() for record in self.records],
            'total_row': self.total_row.to_dict() if self.total_row else None,
            'headers': self.schema.labels,
            'normalized_headers': [header.to_dict() for header in self.normalized_headers],
            'diagnostics': list(self.diagnostics),
        }


@dataclass
class PayrollRecord:
    """
    Merged payroll record for one employee across all documents.

    Attributes:
        identifier: 8-digit employee identifier (join key)
        name: Longest name seen
        designation: Longest designation seen
        earning: Earning field key -> amount
        deduction: Deduction field key -> amount (summary keys removed)
        gross: Gross amount from the earning side
        total_deductions: Total deductions from the deduction side
        net_pay: Net pay from the deduction side
    """
    identifier: str
    name: str = ""
    designation: str = ""
    earning: Dict[str, Decimal] = field(default_factory=dict)
    deduction: Dict[str, Decimal] = field(default_factory=dict)
    gross: Decimal = Decimal('0')
    total_deductions: Decimal = Decimal('0')
    net_pay: Decimal = Decimal('0')

    def to_dict(self) -> Dict[str, Any]:
        """Convert payroll record to dictionary for serialization."""
        return {
            'hrpn': self.identifier,
            'name': self.name,
            'designation': self.designation,
            'earning': {key: float(value) for key, value in self.earning.items()},
            'deduction': {key: float(value) for key, value in self.deduction.items()},
            'gross': float(self.gross),
            'total_ded': float(self.total_deductions),
            'net_pay': float(self.net_pay),
        }


@dataclass
class RecordValidation:
    """Problems found on a single merged record."""
    identifier: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class ValidationSummary:
    """Batch-level totals and observed field keys."""
    total_employees: int = 0
    total_gross: Decimal = Decimal('0')
    total_deductions: Decimal = Decimal('0')
    total_net_pay: Decimal = Decimal('0')
    earning_fields_found: List[str] = field(default_factory=list)
    deduction_fields_found: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_employees': self.total_employees,
            'total_gross': _money(self.total_gross),
            'total_deductions': _money(self.total_deductions),
            'total_net_pay': _money(self.total_net_pay),
            'earning_fields_found': list(self.earning_fields_found),
            'deduction_fields_found': list(self.deduction_fields_found),
        }


@dataclass
class ValidationResult:
    """
    Result of cross-validating a merged record set.

    Attributes:
        is_valid: True when no record produced an error
        total_records: Number of records validated
        valid_records: Number of records without errors
        errors: All error strings, in record order
        warnings: All warning strings, in record order
        record_results: Per-record problems keyed by identifier
        summary: Aggregate totals and observed field keys
    """
    is_valid: bool = True
    total_records: int = 0
    valid_records: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    record_results: Dict[str, RecordValidation] = field(default_factory=dict)
    summary: ValidationSummary = field(default_factory=ValidationSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'total_records': self.total_records,
            'valid_records': self.valid_records,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'summary': self.summary.to_dict(),
        }


@dataclass
class DocumentSummary:
    """Per-file entry of the batch metadata."""
    name: str
    kind: DocumentKind
    month: Optional[str] = None
    bill_no: Optional[str] = None
    record_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file': self.name,
            'type': self.kind.value,
            'month': self.month,
            'bill_no': self.bill_no,
            'record_count': self.record_count,
        }


@dataclass
class DocumentFailure:
    """A document excluded from the batch, and why."""
    name: str
    stage: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {'file': self.name, 'stage': self.stage, 'message': self.message}


@dataclass
class BatchMetadata:
    """Metadata describing one processed batch."""
    processed_at: datetime = field(default_factory=datetime.now)
    month: Optional[str] = None
    bill_no: Optional[str] = None
    office: Optional[str] = None
    files: List[DocumentSummary] = field(default_factory=list)
    failures: List[DocumentFailure] = field(default_factory=list)
    total_employees: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'processed_at': self.processed_at.isoformat(),
            'month': self.month,
            'bill_no': self.bill_no,
            'office': self.office,
            'files': [summary.to_dict() for summary in self.files],
            'failures': [failure.to_dict() for failure in self.failures],
            'total_employees': self.total_employees,
        }


@dataclass
class PayrollBatchResult:
    """Complete output of processing a batch of bill documents."""
    payroll: List[PayrollRecord] = field(default_factory=list)
    validation: ValidationResult = field(default_factory=ValidationResult)
    metadata: BatchMetadata = field(default_factory=BatchMetadata)
    documents: List[DocumentResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payroll': [record.to_dict() for record in self.payroll],
            'validation': self.validation.to_dict(),
            'metadata': self.metadata.to_dict(),
        }
