"""
coffsum Exit Codes and Error Reporting
======================================

Every coffsum command wraps its body in ``try`` and hands any exception to
handle_cli_exception(), which prints one line to stderr and exits:

- Decode, checksum and export failures (CoffError) exit with 1
- Bad arguments and unreadable paths exit with 2
- Anything else is a bug and exits with 3 (traceback under --verbose)

Asking for sections of a file that has none says so on a second line.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn, Optional

import click

from coff_analyzer.errors import CoffError, SectionNotFoundError


class ExitCode(IntEnum):
    """Process exit codes of coffsum."""
    SUCCESS = 0
    ANALYSIS_ERROR = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: Optional[str] = None
) -> NoReturn:
    """
    Report an exception raised by a coffsum command and exit.

    Args:
        error: The exception raised by the command
        verbose: Print the traceback of unexpected errors
        error_type: Operation name used as message prefix ("Checksum", "Export")

    Raises:
        SystemExit: Always
    """
    if isinstance(error, CoffError):
        prefix = f"{error_type} error" if error_type else "Error"
        click.echo(f"{prefix}: {error}", err=True)
        if isinstance(error, SectionNotFoundError) and not error.available:
            click.echo("The file contains no sections.", err=True)
        sys.exit(ExitCode.ANALYSIS_ERROR)

    if isinstance(error, (click.BadParameter, OSError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
