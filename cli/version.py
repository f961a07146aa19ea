"""
Version management utilities for the payroll bill extractor.

The reported version is the base version with the git commit count added to
the patch number when the package runs from a git checkout.
"""

import subprocess
import sys
from pathlib import Path
from typing import Optional


# Base version - this is the only place you need to update the version number
BASE_VERSION = "1.0.0"

PROGRAM_NAME = "payroll-extract"


def _run_git(*args: str) -> Optional[str]:
    """Run a git command in the repository root and return its stripped output."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=Path(__file__).parent.parent,
            capture_output=True,
            text=True,
            timeout=5
        )
    except (subprocess.TimeoutExpired, subprocess.SubprocessError, FileNotFoundError):
        return None

    if result.returncode != 0:
        return None
    return result.stdout.strip()


def get_git_commit_hash(short: bool = True) -> Optional[str]:
    """
    Get the current git commit hash.

    Args:
        short: If True, return short hash (7 chars), otherwise full hash

    Returns:
        Git commit hash string or None if not available
    """
    if short:
        return _run_git("rev-parse", "--short", "HEAD")
    return _run_git("rev-parse", "HEAD")


def get_git_commit_count() -> int:
    """Get the number of commits on the current branch, or 0 if unavailable."""
    output = _run_git("rev-list", "--count", "HEAD")
    try:
        return int(output) if output else 0
    except ValueError:
        return 0


def get_version(include_commit: bool = True) -> str:
    """
    Get the version string.

    Args:
        include_commit: Add the commit count to the base patch number

    Returns:
        Version string in format MAJOR.MINOR.PATCH
    """
    version_parts = BASE_VERSION.split('.')
    if len(version_parts) != 3 or not include_commit:
        return BASE_VERSION

    major, minor, base_patch = version_parts
    return f"{major}.{minor}.{int(base_patch) + get_git_commit_count()}"


def get_version_info() -> dict:
    """
    Get comprehensive version information.

    Returns:
        Dictionary containing version details
    """
    commit_hash = get_git_commit_hash(short=False)
    return {
        "version": get_version(),
        "base_version": BASE_VERSION,
        "commit_hash": commit_hash,
        "commit_count": get_git_commit_count(),
        "python_version": sys.version.split()[0],
        "git_available": commit_hash is not None
    }


__version__ = get_version()
