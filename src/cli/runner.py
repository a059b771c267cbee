from pathlib import Path

from loguru import logger
from rich.console import Console

from src.application.build_pipeline import BuildPipeline
from src.application.use_cases.resolve_dependencies import DependencyResolver
from src.cli.formatters.graph_formatter import format_graph
from src.cli.formatters.result_formatter import (
    format_error,
    format_failure_details,
    format_resolved,
    format_summary,
    format_task_result,
    format_task_started,
)
from src.cli.theme import theme
from src.domain.errors import KeelError
from src.infrastructure.cache.content_addressed_cache import ContentAddressedCache
from src.infrastructure.config.config_loader import load_build_config
from src.infrastructure.persistence.json_fingerprint_store import JsonFingerprintStore
from src.infrastructure.persistence.json_lockfile_store import JsonLockfileStore
from src.infrastructure.repositories import create_repository
from src.infrastructure.toolchains import create_toolchains

console = Console()

# Exit code for configuration, resolution and graph errors (nothing executed)
EXIT_SETUP_ERROR = 2


def create_pipeline(config_path: Path, state_dir: Path | None = None) -> BuildPipeline:
    """Load the configuration and wire the pipeline's adapters.

    The project root is the directory holding the configuration file. The
    state directory defaults to ``settings.state_dir`` under the project root.
    """
    config_path = config_path.resolve()
    config = load_build_config(config_path)
    project_root = config_path.parent

    if state_dir is None:
        state_dir = project_root / config.settings.state_dir
    state_dir = state_dir.resolve()
    logger.debug("Project root {}, state dir {}", project_root, state_dir)

    repositories = [create_repository(r, project_root) for r in config.repositories]
    resolver = DependencyResolver(
        repositories=repositories,
        cache=ContentAddressedCache(state_dir),
        lockfile=JsonLockfileStore(state_dir),
    )
    return BuildPipeline(
        config=config,
        project_root=project_root,
        resolver=resolver,
        toolchains=create_toolchains(),
        fingerprints=JsonFingerprintStore(state_dir),
    )


async def run_build_async(
    config_path: Path,
    clean: bool = False,
    fail_fast: bool | None = None,
    jobs: int | None = None,
    state_dir: Path | None = None,
) -> int:
    """Run a build and return the process exit code."""
    try:
        pipeline = create_pipeline(config_path, state_dir)
        console.print(f"[{theme.HEADER}]Building {pipeline.config.project}[/]")
        summary = await pipeline.build(
            clean=clean,
            fail_fast=fail_fast,
            jobs=jobs,
            on_start=lambda task_id: format_task_started(console, task_id),
            on_result=lambda result: format_task_result(console, result),
        )
    except KeelError as e:
        logger.error("Build aborted: {}", e)
        format_error(console, e)
        return EXIT_SETUP_ERROR

    format_summary(console, summary)
    return summary.exit_code


async def run_clean_async(config_path: Path, state_dir: Path | None = None) -> int:
    try:
        pipeline = create_pipeline(config_path, state_dir)
        result = await pipeline.clean()
    except KeelError as e:
        format_error(console, e)
        return EXIT_SETUP_ERROR

    if result.failed:
        format_failure_details(console, result)
        return 1
    console.print(f"[{theme.SUCCESS}]Cleaned {len(result.outputs)} paths.[/]")
    return 0


async def run_resolve_async(config_path: Path, state_dir: Path | None = None) -> int:
    try:
        pipeline = create_pipeline(config_path, state_dir)
        artifacts = await pipeline.resolve()
    except KeelError as e:
        format_error(console, e)
        return EXIT_SETUP_ERROR

    format_resolved(console, artifacts)
    return 0


def show_graph(config_path: Path) -> int:
    try:
        graph = create_pipeline(config_path).graph()
    except KeelError as e:
        format_error(console, e)
        return EXIT_SETUP_ERROR

    format_graph(console, graph)
    return 0
