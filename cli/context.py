"""
CLI Context module for the payroll bill extractor.

This module provides the shared context and decorators used across CLI commands,
preventing circular imports between cli.main and command modules.
"""

from typing import Optional

import click

from payroll.config import PayrollConfiguration, load_configuration


class CLIContext:
    """Context object to share state between CLI commands."""

    def __init__(self):
        self.verbose = False
        self.quiet = False
        self.config_file = None
        self.configuration: Optional[PayrollConfiguration] = None

    def get_configuration(self) -> PayrollConfiguration:
        """Get or load the pipeline configuration (file, then environment)."""
        if self.configuration is None:
            self.configuration = load_configuration(self.config_file)
        return self.configuration


# Pass context between commands
pass_context = click.make_pass_decorator(CLIContext, ensure=True)
