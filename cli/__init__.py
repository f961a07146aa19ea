"""
CLI package for the payroll bill extractor.

This package provides the command-line interface for extracting, merging
and cross-validating payroll records from pay bill PDFs.
"""

from .version import __version__
