"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from relpub.core.errors import exit_code_for
from relpub.core.result import Err, Result
from relpub.output.console import ConsoleProtocol, Style
from relpub.services.publish.errors import PublishError

T = TypeVar("T")


def report_error(error: PublishError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def exit_with_error(error: PublishError, console: ConsoleProtocol) -> NoReturn:
    """Print the error and exit with the failing tool's status (or 1)."""
    report_error(error, console)
    raise typer.Exit(code=exit_code_for(error.returncode))


def exit_on_error(result: Result[T, PublishError], console: ConsoleProtocol) -> T:
    """Return the value of an Ok, or exit on Err.

    Replaces the boilerplate:
        if isinstance(result, Err):
            console.error(result.error.message)
            raise typer.Exit(code=...)
        value = result.value
    """
    if isinstance(result, Err):
        exit_with_error(result.error, console)
    return result.value
