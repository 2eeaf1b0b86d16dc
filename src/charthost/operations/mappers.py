"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and a command wrapper so
the CLI handles errors consistently.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import typer

T = TypeVar('T')

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_CHARTS_FAILED = 1

EXIT_CODES = {
    "ConfigError": 2,
    "ValueError": 2,
    "HandlerInitError": 3,
}


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to exit code.

    - 0: Success, every chart pulled
    - 1: Run completed but at least one chart failed (returned by the command)
    - 2: Configuration could not be loaded (ConfigError, ValueError)
    - 3: Handler initialization failed, or any unexpected error

    Args:
        exc: Exception to map

    Returns:
        Exit code, with 3 as fallback for unknown exceptions
    """
    return EXIT_CODES.get(type(exc).__name__, 3)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Runs the function and turns any exception into ``typer.Exit`` with the
    mapped exit code after logging it.

    Raises:
        typer.Exit: With the mapped exit code if the function raises
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        logger.error(f"{type(e).__name__}: {e}")
        raise typer.Exit(code=exit_code_for(e)) from e


def exit_for_report(report: Any) -> None:
    """Raise typer.Exit(1) when any chart in the report did not pull."""
    if not report.ok:
        raise typer.Exit(code=EXIT_CHARTS_FAILED)
