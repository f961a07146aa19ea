"""
Payroll extraction pipeline.

This module provides the PayrollPipeline class that takes a batch of bill
documents through the complete workflow:

    tokens -> lines -> classification -> column schema -> employee blocks
    -> parsed employees -> normalized records -> merge -> cross-validation

Each document is parsed independently; a failure in one document is
recorded and the rest of the batch proceeds. Merge and validation run once
all documents have been parsed.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .block_parser import BlockParser
from .classifier import DocumentClassifier
from .config import PayrollConfiguration
from .exceptions import (
    BlockParsingError,
    NoConsumableDocumentsError,
    PayrollProcessingError,
)
from .field_normalizer import FieldNormalizer
from .line_reconstructor import reconstruct_lines
from .merger import PayrollMerger, combine_record_sets
from .models import (
    BatchMetadata,
    DocumentFailure,
    DocumentKind,
    DocumentResult,
    DocumentSummary,
    FieldCategory,
    NormalizedRecord,
    PayrollBatchResult,
    PositionedToken,
)
from .pdf_tokens import PdfTokenExtractor
from .row_segmenter import RowSegmenter
from .schema_detector import SchemaDetector
from .validator import CrossValidator


class PipelinePhase(str, Enum):
    EXTRACTION = "extraction"
    CLASSIFICATION = "classification"
    SCHEMA_DETECTION = "schema-detection"
    SEGMENTATION = "segmentation"
    PARSING = "parsing"
    MERGING = "merging"
    VALIDATION = "validation"
    ERROR = "error"
    COMPLETE = "complete"


ProgressCallback = Callable[[str, str], None]
TokenPages = List[List[PositionedToken]]


@dataclass
class DocumentSource:
    """
    One input document: either already-extracted token pages or a PDF path.

    Attributes:
        name: Display name used in metadata and diagnostics
        pages: Positioned tokens per page
        path: PDF file to extract tokens from when ``pages`` is None
    """
    name: str
    pages: Optional[Sequence[Sequence[PositionedToken]]] = None
    path: Optional[Path] = None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'DocumentSource':
        path = Path(path)
        return cls(name=path.name, path=path)


class PayrollPipeline:
    """
    Main class for turning payroll bill documents into merged records.

    Stages 1-6 (line reconstruction through field normalization) run per
    document and share no mutable state. Merging and validation are barrier
    stages over the whole batch.
    """

    def __init__(self, config: Optional[PayrollConfiguration] = None,
                 token_extractor: Optional[PdfTokenExtractor] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize PayrollPipeline.

        Args:
            config: Pipeline configuration; defaults are used when omitted
            token_extractor: Extractor for PDF sources
            logger: Optional logger instance
        """
        self.config = config or PayrollConfiguration()
        self.logger = logger or logging.getLogger(__name__)
        self.token_extractor = token_extractor or PdfTokenExtractor()
        self.classifier = DocumentClassifier()
        self.schema_detector = SchemaDetector(presence_fallback_x=self.config.presence_fallback_x)
        self.row_segmenter = RowSegmenter()
        self.block_parser = BlockParser()
        self.normalizer = FieldNormalizer(discard_unlabeled_values=self.config.discard_unlabeled_values)
        self.merger = PayrollMerger()
        self.validator = CrossValidator(tolerance=self.config.tolerance)

    def parse_document(self, name: str, pages: Sequence[Sequence[PositionedToken]],
                       progress_callback: Optional[ProgressCallback] = None) -> DocumentResult:
        """
        Parse one document into normalized per-employee records.

        Args:
            name: Document name
            pages: Positioned tokens per page
            progress_callback: Optional phase callback

        Returns:
            DocumentResult for the document

        Raises:
            DocumentClassificationError: If the document kind is undetectable
        """
        notify = _notifier(progress_callback)

        extracted = reconstruct_lines(pages)

        notify(PipelinePhase.CLASSIFICATION, f"Detecting bill type for {name}...")
        meta = self.classifier.classify(extracted.raw_text, source=name)

        notify(PipelinePhase.SCHEMA_DETECTION, f"Parsing headers ({meta.kind.value}) from {name}...")
        first_page_lines = extracted.pages[0].lines if extracted.pages else []
        schema = self.schema_detector.detect(first_page_lines, meta.kind)

        category = FieldCategory(meta.kind.value)
        headers = self.normalizer.normalize_headers(schema.labels, category)

        result = DocumentResult(name=name, meta=meta, schema=schema, normalized_headers=headers)
        if not schema.is_valid:
            result.diagnostics.append(f"{name}: no header columns detected; values are unlabeled")

        notify(PipelinePhase.SEGMENTATION, f"Segmenting employee rows from {name}...")
        segmentation = self.row_segmenter.segment(extracted.pages)
        result.total_row = segmentation.total_row

        notify(PipelinePhase.PARSING, f"Parsing {len(segmentation.blocks)} employee blocks from {name}...")
        for block in segmentation.blocks:
            try:
                parsed = self.block_parser.parse(block, meta.kind, source=name)
            except BlockParsingError as e:
                self.logger.warning(f"Dropped block: {e}")
                result.diagnostics.append(str(e))
                continue

            fields, categories = self.normalizer.normalize(headers, parsed.values)
            result.records.append(NormalizedRecord(
                identifier=parsed.identifier,
                name=parsed.name,
                designation=parsed.designation,
                fields=fields,
                categories=categories,
                raw_values=self.normalizer.retained_values(headers, parsed.values),
                serial_number=parsed.serial_number,
                page=block.page,
            ))

        self.logger.info(f"{name}: {len(result.records)} records "
                         f"({len(result.diagnostics)} diagnostics)")
        return result

    def load_document(self, source: DocumentSource) -> TokenPages:
        """Return the token pages of a source, extracting them from its PDF if needed."""
        if source.pages is not None:
            return [list(page) for page in source.pages]
        if source.path is None:
            raise PayrollProcessingError("Document source has neither pages nor path", source=source.name)
        return self.token_extractor.extract(source.path)

    def process_batch(self, sources: Sequence[DocumentSource],
                      progress_callback: Optional[ProgressCallback] = None,
                      cancel_event: Optional[threading.Event] = None) -> PayrollBatchResult:
        """
        Process a batch of documents end to end.

        Args:
            sources: Documents of one pay period (earning and deduction bills)
            progress_callback: Optional ``(phase, detail)`` callback, always
                invoked from the calling thread
            cancel_event: Checked before each document is loaded and again
                before it is parsed; when set, the remaining documents are skipped

        Returns:
            PayrollBatchResult with merged records, validation and metadata

        Raises:
            NoConsumableDocumentsError: If no document could be parsed
        """
        notify = _notifier(progress_callback)
        metadata = BatchMetadata(processed_at=datetime.now())
        documents: List[DocumentResult] = []

        loaded = self._load_all(sources, notify, cancel_event)

        for source, (pages, load_error) in zip(sources, loaded):
            if cancel_event is not None and cancel_event.is_set():
                metadata.failures.append(DocumentFailure(source.name, 'cancelled', 'Processing cancelled'))
                continue

            if load_error is not None:
                self._record_failure(metadata, source.name, PipelinePhase.EXTRACTION, load_error, notify)
                continue

            try:
                notify(PipelinePhase.EXTRACTION, f"Reconstructing lines for {source.name}...")
                document = self.parse_document(source.name, pages, progress_callback)
            except PayrollProcessingError as e:
                stage = e.details.get('parsing_stage', 'parsing')
                self._record_failure(metadata, source.name, stage, e, notify)
                continue
            except Exception as e:
                self.logger.exception(f"Unexpected error parsing {source.name}")
                wrapped = PayrollProcessingError(f"Unexpected error during parsing: {e}", source=source.name)
                self._record_failure(metadata, source.name, 'parsing', wrapped, notify)
                continue

            documents.append(document)
            metadata.files.append(DocumentSummary(
                name=document.name,
                kind=document.kind,
                month=document.meta.month,
                bill_no=document.meta.bill_no,
                record_count=len(document.records),
            ))
            metadata.month = metadata.month or document.meta.month
            metadata.bill_no = metadata.bill_no or document.meta.bill_no
            metadata.office = metadata.office or document.meta.office

        if not documents:
            raise NoConsumableDocumentsError(
                "No consumable documents in batch",
                failures=[failure.to_dict() for failure in metadata.failures],
            )

        notify(PipelinePhase.MERGING, "Merging records by HRPN...")
        earning = combine_record_sets(d.records for d in documents if d.kind == DocumentKind.EARNING)
        deduction = combine_record_sets(d.records for d in documents if d.kind == DocumentKind.DEDUCTION)
        payroll = self.merger.merge(earning, deduction)

        notify(PipelinePhase.VALIDATION, "Cross-validating results...")
        validation = self.validator.validate(payroll)

        metadata.total_employees = len(payroll)
        notify(PipelinePhase.COMPLETE, f"Processed {len(payroll)} employees")

        return PayrollBatchResult(payroll=payroll, validation=validation,
                                  metadata=metadata, documents=documents)

    def process_files(self, paths: Sequence[Union[str, Path]],
                      progress_callback: Optional[ProgressCallback] = None,
                      cancel_event: Optional[threading.Event] = None) -> PayrollBatchResult:
        """Process PDF files as one batch."""
        return self.process_batch([DocumentSource.from_path(p) for p in paths],
                                  progress_callback, cancel_event)

    def _load_all(self, sources: Sequence[DocumentSource], notify,
                  cancel_event: Optional[threading.Event] = None
                  ) -> List[Tuple[Optional[TokenPages], Optional[Exception]]]:
        """
        Load every source, concurrently when allowed, preserving input order.

        Sources not yet started when ``cancel_event`` is set come back as
        ``(None, None)``. Progress is reported from this thread only.
        """

        def cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        def load(source: DocumentSource):
            if cancelled():
                return None, None
            try:
                return self.load_document(source), None
            except PayrollProcessingError as e:
                return None, e
            except Exception as e:
                self.logger.exception(f"Unexpected error loading {source.name}")
                return None, PayrollProcessingError(f"Unexpected error during extraction: {e}",
                                                    source=source.name)

        workers = min(self.config.max_workers, len(sources))
        if workers <= 1:
            loaded = []
            for source in sources:
                if not cancelled():
                    notify(PipelinePhase.EXTRACTION, f"Reading text from {source.name}...")
                loaded.append(load(source))
            return loaded

        self.logger.info(f"Loading {len(sources)} documents with {workers} workers")
        for source in sources:
            notify(PipelinePhase.EXTRACTION, f"Reading text from {source.name}...")
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(load, sources))

    def _record_failure(self, metadata: BatchMetadata, name: str, stage,
                        error: Exception, notify) -> None:
        stage = stage.value if isinstance(stage, PipelinePhase) else str(stage)
        self.logger.warning(f"Failed to process {name} at {stage}: {error}")
        metadata.failures.append(DocumentFailure(name=name, stage=stage, message=str(error)))
        notify(PipelinePhase.ERROR, f"Failed to parse {name}: {error}")


def _notifier(progress_callback: Optional[ProgressCallback]):
    """Wrap an optional callback so stages can report phases unconditionally."""
    def notify(phase: PipelinePhase, detail: str) -> None:
        if progress_callback is not None:
            progress_callback(phase.value, detail)
    return notify
