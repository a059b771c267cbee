import asyncio
from pathlib import Path

import typer

from src.cli.runner import run_clean_async
from src.infrastructure.config.config_loader import DEFAULT_CONFIG_NAME


def clean(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_NAME), "--config", "-c", help="Build configuration file"
    ),
    state_dir: Path | None = typer.Option(None, "--state-dir", help="State directory"),
) -> None:
    """Delete every declared output and reset fingerprints."""
    exit_code = asyncio.run(run_clean_async(config_path=config, state_dir=state_dir))
    if exit_code != 0:
        raise typer.Exit(exit_code)
