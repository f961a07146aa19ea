"""
Progress indicator utilities for the CLI interface.

This module turns the pipeline's phase callbacks into step-by-step status
lines for long-running batch operations.
"""

import threading
import time
from typing import Optional, Sequence

import click


PIPELINE_STEPS = (
    "extraction",
    "classification",
    "schema-detection",
    "segmentation",
    "parsing",
    "merging",
    "validation",
)


class MultiStepProgress:
    """
    Progress indicator for multi-step operations.

    Instances are callable with ``(phase, detail)`` so they can be handed to
    the pipeline directly as its progress callback. Extraction phases are
    reported from worker threads, so output is serialized with a lock.
    """

    def __init__(self, steps: Sequence[str] = PIPELINE_STEPS,
                 overall_label: str = "Overall Progress"):
        """
        Initialize multi-step progress.

        Args:
            steps: Ordered step names
            overall_label: Label for overall progress
        """
        self.steps = list(steps)
        self.overall_label = overall_label
        self.current_step = 0
        self.total_steps = len(self.steps)
        self.errors = 0
        self._lock = threading.Lock()
        self._started = time.time()

    def __call__(self, phase: str, detail: str) -> None:
        with self._lock:
            if phase == "error":
                self.errors += 1
                click.echo(click.style(f"✗ {detail}", fg='red'))
            elif phase == "complete":
                self.finish(success=self.errors == 0, message=detail)
            else:
                self.start_step(phase, detail)

    def start_step(self, step_name: str, message: Optional[str] = None):
        """
        Start a new step.

        Args:
            step_name: Name of the step
            message: Optional message to display
        """
        if step_name in self.steps:
            self.current_step = self.steps.index(step_name) + 1

        step_msg = f"Step {self.current_step}/{self.total_steps}: {step_name}"
        if message:
            step_msg += f" - {message}"

        click.echo(step_msg)

    def finish(self, success: bool = True, message: Optional[str] = None):
        """
        Finish the multi-step operation.

        Args:
            success: Whether all steps completed successfully
            message: Optional final message
        """
        status = "✓" if success else "✗"
        final_msg = f"{status} {self.overall_label} complete"
        if message:
            final_msg += f" - {message}"
        final_msg += f" ({format_elapsed(time.time() - self._started)})"

        click.echo(final_msg)


def format_elapsed(seconds: float) -> str:
    """
    Format an elapsed duration for display.

    Args:
        seconds: Elapsed time in seconds

    Returns:
        Human readable duration
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"
