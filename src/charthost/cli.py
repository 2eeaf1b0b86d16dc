"""
charthost CLI

Reads the registry configuration, pulls every configured chart and writes the
charts to the output directory:

    charthost --config ./config.yaml --outputPath ./charts

CONFIG_PATH and OUTPUT_PATH override the defaults when the flags are not
given.
"""
from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.logging import RichHandler

from .cli_context import CLIContext
from .config import ChartHostConfig
from .operations import exit_for_report, print_run_report, run_and_exit

app = typer.Typer(name="charthost", help="Mirror Helm charts from OCI and legacy registries")

DEFAULT_CONFIG_PATH = "./config.yaml"
DEFAULT_OUTPUT_PATH = "./charts"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def pull(
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH, "--config",
        envvar=["CONFIG_PATH", "CHARTHOST_CONFIG_PATH"],
        help="Path to the configuration file (JSON or YAML)",
    ),
    output_path: Path = typer.Option(
        DEFAULT_OUTPUT_PATH, "--outputPath",
        envvar=["OUTPUT_PATH", "OUTPUT_DIR"],
        help="Path to the output directory",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Pull every configured chart into the output directory."""

    def _pull() -> None:
        _configure_logging(verbose)
        cfg = ChartHostConfig.from_file(config)
        context = CLIContext.from_env()
        try:
            orchestrator = context.orchestrator()
            report = orchestrator.run(cfg, output_path)
        finally:
            context.close()

        print_run_report(report)
        exit_for_report(report)

    run_and_exit(_pull)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
