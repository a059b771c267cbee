import asyncio
from pathlib import Path

import typer

from src.cli.runner import run_build_async
from src.infrastructure.config.config_loader import DEFAULT_CONFIG_NAME


def build(
    clean: bool = typer.Option(False, "--clean", help="Delete outputs and fingerprints first"),
    fail_fast: bool = typer.Option(
        False, "--fail-fast", help="Stop scheduling tasks after the first failure"
    ),
    jobs: int | None = typer.Option(
        None, "--jobs", "-j", min=1, help="Concurrent tasks (default: CPU count)"
    ),
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_NAME), "--config", "-c", help="Build configuration file"
    ),
    state_dir: Path | None = typer.Option(None, "--state-dir", help="State directory"),
) -> None:
    """Resolve dependencies and run every task that is out of date."""
    exit_code = asyncio.run(
        run_build_async(
            config_path=config,
            clean=clean,
            fail_fast=True if fail_fast else None,
            jobs=jobs,
            state_dir=state_dir,
        )
    )
    if exit_code != 0:
        raise typer.Exit(exit_code)
