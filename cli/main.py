"""
Main CLI entry point for the payroll bill extractor.

This module provides the main command-line interface with its commands
and global options.
"""

import logging
import sys

import click

from cli.commands import payroll_commands
from cli.context import CLIContext, pass_context
from cli.exceptions import CLIError
from cli.formatters import setup_logging
from cli.version import PROGRAM_NAME, get_version, get_version_info


@click.group(invoke_without_command=True)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-essential output')
@click.option('--config-file', type=click.Path(exists=True, dir_okay=False),
              help='JSON configuration file (tolerance, max_workers, ...)')
@click.version_option(version=get_version(), prog_name=PROGRAM_NAME)
@click.pass_context
def cli(ctx, verbose, quiet, config_file):
    """
    Payroll Bill Extractor - CLI Tool

    Reads earning-side and deduction-side pay bill PDFs, reconstructs one
    record per employee, merges both sides by HRPN and cross-checks the
    arithmetic.

    Examples:
        # Process a month of bills
        payroll-extract process ./bills/2026-01 -o january.json

        # See which columns were detected in a bill
        payroll-extract inspect earning.pdf
    """
    cli_ctx = CLIContext()
    cli_ctx.verbose = verbose
    cli_ctx.quiet = quiet
    cli_ctx.config_file = config_file
    ctx.obj = cli_ctx

    setup_logging(verbose, quiet)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option('--detailed', is_flag=True, help='Show detailed version information')
@pass_context
def version(ctx, detailed):
    """Display version information."""
    version_info = get_version_info()
    click.echo(f"Payroll Bill Extractor v{version_info['version']}")

    if detailed:
        details = {
            'Base Version': version_info['base_version'],
            'Python Version': version_info['python_version'],
            'Git Commit': version_info['commit_hash'] or 'Not available',
        }
        click.echo("\nDetailed Information:")
        click.echo("=" * 40)
        for key, value in details.items():
            click.echo(f"{key:20}: {value}")


cli.add_command(payroll_commands.process)
cli.add_command(payroll_commands.inspect)


def main():
    """Main entry point for the CLI application."""
    try:
        cli()
    except CLIError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user.", err=True)
        sys.exit(130)
    except Exception as e:
        logger = logging.getLogger(__name__)
        logger.exception("Unexpected error occurred")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
