"""
Payroll bill commands for the CLI interface.

This module implements the bill-related commands:
- process: Extract, merge and cross-validate a batch of pay bills
- inspect: Show what the pipeline sees in a single bill document
"""

import logging
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import click
from rich.console import Console
from rich.table import Table

from cli.context import pass_context
from cli.error_handlers import error_handler
from cli.exceptions import PayrollValidationFailed, UserCancelledError
from cli.formatters import (
    display_summary, format_table, payroll_table_rows, print_error, print_info,
    print_success, print_warning, write_json,
)
from cli.progress import MultiStepProgress
from cli.validators import TOLERANCE, WORKER_COUNT, discover_pdf_files
from payroll.models import DocumentResult, PayrollBatchResult
from payroll.pipeline import DocumentSource, PayrollPipeline
from payroll.storage import month_label_to_date, payroll_to_storage_row


logger = logging.getLogger(__name__)
console = Console()

# Warnings beyond this many are summarized unless --verbose is given
MAX_LISTED_WARNINGS = 20


@click.command()
@click.argument('input_paths', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='Write the batch result (payroll, validation, metadata) as JSON')
@click.option('--storage-rows', type=click.Path(dir_okay=False), default=None,
              help='Write flattened per-employee storage rows as JSON')
@click.option('--tolerance', type=TOLERANCE, default=None,
              help='Absolute amount totals may differ by (default from configuration)')
@click.option('--max-workers', type=WORKER_COUNT, default=None,
              help='Number of documents loaded concurrently')
@click.option('--strict', is_flag=True,
              help='Exit with status 1 when cross-validation reports errors')
@click.option('--show-records/--no-show-records', default=True,
              help='Print the per-employee table')
@pass_context
@error_handler
def process(ctx, input_paths, output, storage_rows, tolerance, max_workers, strict, show_records):
    """
    Process earning-side and deduction-side pay bills into merged payroll records.

    INPUT_PATHS may be PDF files or directories; directories are searched for
    *.pdf files. All documents are treated as one pay period.

    Examples:
        # Process both sides of a bill
        payroll-extract process earning.pdf deduction.pdf

        # Process a folder and save the result
        payroll-extract process ./bills/2026-01 -o january.json

        # Fail the run on arithmetic mismatches
        payroll-extract process ./bills/2026-01 --strict
    """
    config = ctx.get_configuration()
    overrides: Dict[str, Any] = {}
    if tolerance is not None:
        overrides['tolerance'] = tolerance
    if max_workers is not None:
        overrides['max_workers'] = max_workers
    if overrides:
        config = replace(config, **overrides)

    pdf_files = discover_pdf_files(input_paths)
    if not ctx.quiet:
        print_info(f"Found {len(pdf_files)} PDF file(s) to process")

    pipeline = PayrollPipeline(config=config)
    progress = None if ctx.quiet else MultiStepProgress(overall_label="Payroll extraction")
    result = _run_batch(pipeline, [DocumentSource.from_path(p) for p in pdf_files], progress)

    _display_batch_result(result, show_records=show_records, verbose=ctx.verbose)

    if output:
        write_json(result.to_dict(), output)
        print_success(f"Results saved to: {output}")

    if storage_rows:
        write_json(build_storage_rows(result), storage_rows)
        print_success(f"Storage rows saved to: {storage_rows}")

    if strict and not result.validation.is_valid:
        raise PayrollValidationFailed(len(result.validation.errors))


@click.command()
@click.argument('pdf_path', type=click.Path(exists=True, dir_okay=False))
@pass_context
@error_handler
def inspect(ctx, pdf_path):
    """
    Show the detected metadata, columns and employee rows of one bill.

    Useful when a bill's layout has drifted and records come out unlabeled
    or missing.
    """
    pipeline = PayrollPipeline(config=ctx.get_configuration())
    path = Path(pdf_path)
    pages = pipeline.token_extractor.extract(path)
    document = pipeline.parse_document(path.name, pages)

    display_summary(f"Document: {document.name}", {
        'type': document.kind.value,
        'month': document.meta.month,
        'bill_no': document.meta.bill_no,
        'office': document.meta.office,
        'pages': len(pages),
        'records': len(document.records),
    })

    if document.schema.is_valid:
        _display_columns_table(document)
    else:
        print_warning("No header columns detected")

    click.echo("\nEmployee rows per page")
    per_page = Counter(record.page for record in document.records)
    click.echo(format_table([{'Page': page, 'Records': count} for page, count in sorted(per_page.items())]))

    if document.total_row:
        click.echo(f"\nTotal row (page {document.total_row.page}): {document.total_row.raw_text}")
    else:
        print_warning("No total row found")

    for diagnostic in document.diagnostics:
        print_warning(diagnostic)


def _display_columns_table(document: DocumentResult):
    """Display detected header columns and their canonical keys."""
    table = Table(title="Detected Columns", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Label", style="cyan")
    table.add_column("X", justify="right")
    table.add_column("Key", style="green")
    table.add_column("Category")
    table.add_column("Matched", justify="center")

    for i, (column, header) in enumerate(zip(document.schema.columns, document.normalized_headers), 1):
        table.add_row(
            str(i),
            column.label,
            f"{column.x:.1f}",
            header.canonical,
            header.category.value,
            "yes" if header.matched else "[yellow]no[/yellow]",
        )

    console.print(table)


def build_storage_rows(result: PayrollBatchResult) -> List[Dict[str, Any]]:
    """Flatten every merged record of a batch into storage rows."""
    month_label = result.metadata.month or ''
    month_date = month_label_to_date(month_label) if month_label else ''
    source_files = [summary.name for summary in result.metadata.files]
    return [
        payroll_to_storage_row(record, month_date, month_label, source_files,
                               bill_no=result.metadata.bill_no, office=result.metadata.office)
        for record in result.payroll
    ]


def _run_batch(pipeline: PayrollPipeline, sources: Sequence[DocumentSource],
               progress: Optional[MultiStepProgress]) -> PayrollBatchResult:
    """
    Run the batch on a worker thread so Ctrl+C can request cancellation.

    Cancellation is honoured between documents; the partial result is
    discarded.
    """
    cancel_event = threading.Event()
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(pipeline.process_batch, sources, progress, cancel_event)
        try:
            return future.result()
        except KeyboardInterrupt:
            cancel_event.set()
            logger.info("Cancellation requested, waiting for the current document to finish")
            raise UserCancelledError("Processing cancelled by user")


def _display_batch_result(result: PayrollBatchResult, show_records: bool, verbose: bool) -> None:
    metadata = result.metadata
    summary = result.validation.summary

    display_summary("Processing Results", {
        'month': metadata.month,
        'bill_no': metadata.bill_no,
        'office': metadata.office,
        'files_processed': len(metadata.files),
        'files_failed': len(metadata.failures),
        'employees': summary.total_employees,
        'total_gross': summary.total_gross,
        'total_deductions': summary.total_deductions,
        'total_net_pay': summary.total_net_pay,
        'earning_fields': summary.earning_fields_found,
        'deduction_fields': summary.deduction_fields_found,
    })

    for failure in metadata.failures:
        print_warning(f"{failure.name} skipped ({failure.stage}): {failure.message}")

    if show_records and result.payroll:
        click.echo()
        click.echo(format_table(payroll_table_rows(result.payroll)))

    for error in result.validation.errors:
        print_error(error)

    warnings = result.validation.warnings
    listed = warnings if verbose else warnings[:MAX_LISTED_WARNINGS]
    for warning in listed:
        print_warning(warning)
    if len(listed) < len(warnings):
        print_info(f"{len(warnings) - len(listed)} more warning(s); use --verbose to list all")

    if result.validation.is_valid:
        print_success(f"Cross-validation passed for {result.validation.total_records} employees")
    else:
        print_error(f"Cross-validation found {len(result.validation.errors)} error(s) in "
                    f"{result.validation.total_records - result.validation.valid_records} employee(s)")
