"""Shared error reporting for CLI commands.

Exit codes:
    1    any jumpdeck error
    130  cancelled by the operator
    N    the external tool's own exit code when it failed
"""

import sys
from typing import NoReturn

import click

from jumpdeck.exceptions import (
    ConnectionCancelledError,
    CredentialError,
    JumpdeckError,
    SubprocessFailedError,
)

EXIT_INTERRUPTED = 130


def exit_code_for(error: JumpdeckError) -> int:
    if isinstance(error, ConnectionCancelledError):
        return EXIT_INTERRUPTED
    if isinstance(error, SubprocessFailedError) and error.exit_code > 0:
        return error.exit_code
    return 1


def report_error(error: JumpdeckError) -> None:
    """Print ``error`` to stderr with its suggestion or hint, if any."""
    if isinstance(error, ConnectionCancelledError):
        click.echo("\nInterrupted by user", err=True)
        return
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    if isinstance(error, CredentialError) and error.suggestion:
        click.echo(click.style(f"Suggestion: {error.suggestion}", fg="yellow"), err=True)
    if isinstance(error, SubprocessFailedError) and error.hint:
        click.echo(click.style(f"Hint: {error.hint}", fg="yellow"), err=True)


def fail(error: JumpdeckError) -> NoReturn:
    report_error(error)
    sys.exit(exit_code_for(error))


def interrupted() -> NoReturn:
    click.echo("\nInterrupted by user", err=True)
    sys.exit(EXIT_INTERRUPTED)


def warn(message: str) -> None:
    click.echo(click.style(f"Warning: {message}", fg="yellow"), err=True)
