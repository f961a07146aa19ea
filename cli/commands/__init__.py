"""
CLI command modules for the payroll bill extractor.

This package contains the command implementations:
- payroll_commands: Batch processing and single-document inspection
"""

from . import payroll_commands

__all__ = [
    'payroll_commands',
]
