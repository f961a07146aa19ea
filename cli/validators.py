"""
Input validation utilities for the CLI interface.

This module provides validation functions for command options and input
paths, plus click parameter types wrapping them.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, List, Union

import click

from cli.exceptions import FileNotFoundError, ValidationError


def validate_tolerance(tolerance: Union[str, float, Decimal]) -> Decimal:
    """
    Validate and convert an arithmetic tolerance.

    Args:
        tolerance: Tolerance value to validate

    Returns:
        Validated tolerance as Decimal

    Raises:
        ValidationError: If the tolerance is not a non-negative amount
    """
    if tolerance is None:
        raise ValidationError("Tolerance cannot be None")

    try:
        if isinstance(tolerance, str):
            value = Decimal(tolerance.strip().replace(',', ''))
        else:
            value = Decimal(str(tolerance))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid tolerance format: {tolerance}")

    if not value.is_finite():
        raise ValidationError(f"Invalid tolerance format: {tolerance}")

    if value < 0:
        raise ValidationError("Tolerance cannot be negative")

    return value


def validate_max_workers(max_workers: Union[str, int]) -> int:
    """
    Validate the number of concurrent document loaders.

    Raises:
        ValidationError: If the value is not an integer between 1 and 32
    """
    try:
        value = int(max_workers)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid worker count: {max_workers}")

    if value < 1 or value > 32:
        raise ValidationError("Worker count must be between 1 and 32")

    return value


def discover_pdf_files(input_paths: Iterable[Union[str, Path]]) -> List[Path]:
    """
    Expand input paths into the PDF files to process.

    Files are taken as given; directories contribute their ``*.pdf`` files
    in sorted order. Duplicates are dropped, keeping the first occurrence.

    Args:
        input_paths: Files and/or directories

    Returns:
        PDF file paths in processing order

    Raises:
        ValidationError: If a file does not have a .pdf extension
        FileNotFoundError: If a path does not exist or a directory holds no PDFs
    """
    pdf_files: List[Path] = []
    seen = set()

    for raw_path in input_paths:
        path = Path(raw_path)
        if not path.exists():
            raise FileNotFoundError(str(path))

        if path.is_dir():
            candidates = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() == '.pdf')
            if not candidates:
                raise FileNotFoundError(f"{path} (no PDF files in directory)")
        elif path.suffix.lower() == '.pdf':
            candidates = [path]
        else:
            raise ValidationError(f"File is not a PDF: {path}")

        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                pdf_files.append(candidate)

    return pdf_files


# Click parameter types for use with Click commands
class ToleranceType(click.ParamType):
    """Click parameter type for arithmetic tolerances."""
    name = "tolerance"

    def convert(self, value, param, ctx):
        try:
            return validate_tolerance(value)
        except ValidationError as e:
            self.fail(str(e), param, ctx)


class WorkerCountType(click.ParamType):
    """Click parameter type for worker counts."""
    name = "workers"

    def convert(self, value, param, ctx):
        try:
            return validate_max_workers(value)
        except ValidationError as e:
            self.fail(str(e), param, ctx)


# Create instances for use in Click commands
TOLERANCE = ToleranceType()
WORKER_COUNT = WorkerCountType()
