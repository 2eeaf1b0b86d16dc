"""
Operations package - CLI support layer.

Centralizes exception-to-exit-code mapping and human-readable output so the
Typer command stays thin and testable.
"""
from .mappers import exit_code_for, exit_for_report, run_and_exit
from .printers import print_run_report

__all__ = ["exit_code_for", "exit_for_report", "run_and_exit", "print_run_report"]
