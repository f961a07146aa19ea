"""
Output formatting utilities for the CLI interface.

This module provides functions for formatting output, setting up logging,
and displaying payroll data as tables and JSON.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import click
from tabulate import tabulate

from payroll.models import PayrollRecord


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Setup logging configuration for the CLI application.

    Args:
        verbose: Enable verbose (DEBUG) logging
        quiet: Suppress non-essential output (WARNING+ only)
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    # Configure root logger
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # pdfminer logs every content stream operator at DEBUG
    if not verbose:
        logging.getLogger('pdfminer').setLevel(logging.WARNING)
        logging.getLogger('pypdf').setLevel(logging.WARNING)


def format_amount(amount: Union[Decimal, float, int, None]) -> str:
    """
    Format a numeric amount with two decimals and thousands separators.

    Args:
        amount: Numeric amount to format

    Returns:
        Formatted amount string
    """
    if amount is None:
        return "N/A"

    try:
        return f"{float(amount):,.2f}"
    except (ValueError, TypeError):
        return str(amount)


def truncate_text(text: Optional[str], max_length: int = 30) -> str:
    """
    Truncate text to a maximum length with ellipsis.

    Args:
        text: Text to truncate
        max_length: Maximum length before truncation

    Returns:
        Truncated text with ellipsis if needed
    """
    if not text:
        return ""

    if len(text) <= max_length:
        return text

    return text[:max_length - 3] + "..."


def format_table(data: List[Dict[str, Any]], headers: Optional[List[str]] = None,
                 tablefmt: str = "grid") -> str:
    """
    Format data as a table using tabulate.

    Args:
        data: List of dictionaries containing row data
        headers: Optional list of column headers
        tablefmt: Table format style

    Returns:
        Formatted table string
    """
    if not data:
        return "No data to display."

    if headers is None:
        headers = list(data[0].keys())

    rows = []
    for row in data:
        formatted_row = []
        for header in headers:
            value = row.get(header, "")
            if isinstance(value, (Decimal, float)):
                formatted_row.append(format_amount(value))
            elif isinstance(value, str):
                formatted_row.append(truncate_text(value))
            else:
                formatted_row.append(str(value) if value is not None else "")
        rows.append(formatted_row)

    return tabulate(rows, headers=headers, tablefmt=tablefmt)


def payroll_table_rows(records: Sequence[PayrollRecord]) -> List[Dict[str, Any]]:
    """Summary columns of merged records for table display."""
    return [
        {
            'HRPN': record.identifier,
            'Name': record.name,
            'Designation': record.designation,
            'Gross': record.gross,
            'Total Ded': record.total_deductions,
            'Net Pay': record.net_pay,
        }
        for record in records
    ]


def format_json(data: Any, indent: int = 2) -> str:
    """
    Format data as JSON string.

    Args:
        data: Data to format as JSON
        indent: JSON indentation level

    Returns:
        Formatted JSON string
    """
    def json_serializer(obj):
        """Custom JSON serializer for special types."""
        if isinstance(obj, Decimal):
            return float(obj)
        elif isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, Path):
            return str(obj)
        elif hasattr(obj, 'to_dict'):
            return obj.to_dict()
        raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

    return json.dumps(data, indent=indent, default=json_serializer, ensure_ascii=False)


def write_json(data: Any, output_file: Union[str, Path]) -> None:
    """Write data to a JSON file."""
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(format_json(data))
        f.write("\n")


def print_success(message: str) -> None:
    """Print a success message with green checkmark."""
    click.echo(click.style(f"✓ {message}", fg='green'))


def print_warning(message: str) -> None:
    """Print a warning message with yellow warning symbol."""
    click.echo(click.style(f"⚠ Warning: {message}", fg='yellow'))


def print_error(message: str) -> None:
    """Print an error message with red X symbol."""
    click.echo(click.style(f"✗ Error: {message}", fg='red'), err=True)


def print_info(message: str) -> None:
    """Print an info message with blue info symbol."""
    click.echo(click.style(f"ℹ {message}", fg='blue'))


def display_summary(title: str, stats: Dict[str, Any]) -> None:
    """
    Display a formatted summary with title and statistics.

    Args:
        title: Summary title
        stats: Dictionary of statistics to display
    """
    click.echo(f"\n{title}")
    click.echo("=" * len(title))

    for key, value in stats.items():
        formatted_key = key.replace('_', ' ').title()

        if isinstance(value, (Decimal, float)):
            formatted_value = format_amount(value)
        elif isinstance(value, bool):
            formatted_value = "Yes" if value else "No"
        elif isinstance(value, (list, tuple)):
            formatted_value = ", ".join(str(v) for v in value) or "-"
        elif value is None:
            formatted_value = "N/A"
        else:
            formatted_value = str(value)

        click.echo(f"  {formatted_key}: {formatted_value}")
