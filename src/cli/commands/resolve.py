import asyncio
from pathlib import Path

import typer

from src.cli.runner import run_resolve_async
from src.infrastructure.config.config_loader import DEFAULT_CONFIG_NAME


def resolve(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_NAME), "--config", "-c", help="Build configuration file"
    ),
    state_dir: Path | None = typer.Option(None, "--state-dir", help="State directory"),
) -> None:
    """Resolve declared dependencies and update the lockfile."""
    exit_code = asyncio.run(run_resolve_async(config_path=config, state_dir=state_dir))
    if exit_code != 0:
        raise typer.Exit(exit_code)
