from pathlib import Path

import typer

from src.cli.runner import show_graph
from src.infrastructure.config.config_loader import DEFAULT_CONFIG_NAME


def graph(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_NAME), "--config", "-c", help="Build configuration file"
    ),
) -> None:
    """Show tasks in execution order."""
    exit_code = show_graph(config)
    if exit_code != 0:
        raise typer.Exit(exit_code)
