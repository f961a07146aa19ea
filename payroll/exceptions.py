"""
Custom exceptions for payroll bill processing operations.

This module defines specific exception classes for the different kinds of
errors that can occur while turning payroll bill documents into records.
"""

from typing import Optional, Dict, Any, List


class PayrollProcessingError(Exception):
    """Base exception for all payroll processing errors."""

    def __init__(self, message: str, source: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.source = source
        self.details = details or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.source:
            base_msg = f"{base_msg} (document: {self.source})"
        return base_msg


class PDFReadabilityError(PayrollProcessingError):
    """Raised when a PDF file cannot be read or accessed."""

    def __init__(self, message: str, source: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, source)
        self.original_error = original_error
        if original_error:
            self.details['original_error'] = str(original_error)
            self.details['error_type'] = type(original_error).__name__


class TextExtractionError(PayrollProcessingError):
    """Raised when no positioned text can be extracted from a document."""

    def __init__(self, message: str, source: Optional[str] = None,
                 page_number: Optional[int] = None,
                 extraction_method: Optional[str] = None):
        super().__init__(message, source)
        self.page_number = page_number
        self.extraction_method = extraction_method

        if page_number is not None:
            self.details['page_number'] = page_number
        if extraction_method:
            self.details['extraction_method'] = extraction_method


class DocumentClassificationError(PayrollProcessingError):
    """Raised when a document is neither an earning-side nor a deduction-side bill."""

    def __init__(self, message: str, source: Optional[str] = None,
                 extracted_text: Optional[str] = None):
        super().__init__(message, source)
        self.details['parsing_stage'] = 'classification'
        if extracted_text:
            # First 500 chars are enough to see what the document was
            self.details['text_sample'] = extracted_text[:500]


class BlockParsingError(PayrollProcessingError):
    """Raised when a single employee block cannot be parsed."""

    def __init__(self, message: str, source: Optional[str] = None,
                 page_number: Optional[int] = None,
                 line_text: Optional[str] = None):
        super().__init__(message, source)
        self.page_number = page_number
        self.line_text = line_text
        self.details['parsing_stage'] = 'block_parsing'

        if page_number is not None:
            self.details['page_number'] = page_number
        if line_text:
            self.details['line_text'] = line_text


class NoConsumableDocumentsError(PayrollProcessingError):
    """Raised when a batch contains no document that could be parsed."""

    def __init__(self, message: str, failures: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.failures = failures or []
        self.details['failures'] = self.failures


class ConfigurationError(PayrollProcessingError):
    """Raised when pipeline configuration is invalid."""

    def __init__(self, message: str, source: Optional[str] = None,
                 key: Optional[str] = None):
        super().__init__(message, source)
        self.key = key
        if key:
            self.details['key'] = key
