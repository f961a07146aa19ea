"""
Centralized error handling utilities for CLI commands.

Library exceptions are translated into CLI exceptions carrying exit codes,
recovery suggestions are printed, and the command exits with the matching
code.
"""

import logging
import sys
from functools import wraps
from typing import Callable

from cli.exceptions import (
    CLIError,
    ConfigurationError as CLIConfigurationError,
    ProcessingError,
    UserCancelledError,
)
from cli.formatters import print_error, print_info
from payroll.exceptions import (
    ConfigurationError,
    DocumentClassificationError,
    NoConsumableDocumentsError,
    PayrollProcessingError,
    PDFReadabilityError,
    TextExtractionError,
)

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Centralized error handling with recovery suggestions."""

    @staticmethod
    def handle_processing_error(error: PayrollProcessingError) -> None:
        """
        Print recovery suggestions for a processing failure.

        Args:
            error: The processing error that occurred
        """
        if isinstance(error, NoConsumableDocumentsError):
            print_info("None of the input documents could be parsed:")
            for failure in error.failures:
                print_info(f"  - {failure['file']} ({failure['stage']}): {failure['message']}")
            print_info("Recovery suggestions:")
            print_info("  1. Check that the inputs are earning-side or deduction-side pay bills")
            print_info("  2. Inspect a single file: payroll-extract inspect <file.pdf>")

        elif isinstance(error, PDFReadabilityError):
            print_info("Recovery suggestions:")
            print_info("  1. Verify the PDF opens in a PDF viewer")
            print_info("  2. Check if the PDF requires a password")

        elif isinstance(error, TextExtractionError):
            print_info("Recovery suggestions:")
            print_info("  1. Ensure the PDF contains text (not just scanned images)")

        elif isinstance(error, DocumentClassificationError):
            print_info("Recovery suggestions:")
            print_info("  1. The document must mention 'Earning Side' or 'Deduction Side'")

    @staticmethod
    def with_error_handling(func: Callable) -> Callable:
        """
        Decorator for consistent error handling across commands.

        Returns:
            Wrapped command that exits with the CLI error's exit code
        """
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return _translate_errors(func, *args, **kwargs)
            except CLIError as e:
                print_error(str(e))
                sys.exit(e.exit_code)
        return wrapper


def _translate_errors(func: Callable, *args, **kwargs):
    """Run a command, re-raising library errors as CLI errors."""
    try:
        return func(*args, **kwargs)

    except CLIError:
        raise

    except ConfigurationError as e:
        logger.warning(f"Configuration error in {func.__name__}: {e}")
        raise CLIConfigurationError(str(e)) from e

    except PayrollProcessingError as e:
        logger.error(f"Processing error in {func.__name__}: {e}")
        ErrorHandler.handle_processing_error(e)
        raise ProcessingError(str(e)) from e

    except KeyboardInterrupt as e:
        logger.info(f"User interrupted {func.__name__}")
        raise UserCancelledError() from e

    except OSError as e:
        logger.error(f"I/O error in {func.__name__}: {e}")
        raise CLIError(f"I/O error: {e}") from e


# Export the main decorator for easy use
error_handler = ErrorHandler.with_error_handling
