from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.application.dto.run_summary import RunSummary
from src.cli.theme import theme
from src.domain.entities.build_result import BuildResult
from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.errors import KeelError, UnresolvedDependency
from src.domain.value_objects.build_status import BuildStatus

STATUS_STYLES = {
    BuildStatus.SUCCEEDED: theme.STATUS_SUCCEEDED,
    BuildStatus.FAILED: theme.STATUS_FAILED,
    BuildStatus.SKIPPED_CACHED: theme.STATUS_SKIPPED,
    BuildStatus.BLOCKED: theme.STATUS_BLOCKED,
}

STATUS_LABELS = {
    BuildStatus.SUCCEEDED: "done",
    BuildStatus.FAILED: "FAILED",
    BuildStatus.SKIPPED_CACHED: "up-to-date",
    BuildStatus.BLOCKED: "blocked",
}


def format_duration(duration_ms: int) -> str:
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    seconds = duration_ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes}m{rest:02d}s"


def format_task_started(console: Console, task_id: str) -> None:
    console.print(f"[{theme.STATUS_RUNNING}]▶[/] {task_id}")


def format_task_result(console: Console, result: BuildResult) -> None:
    style = STATUS_STYLES[result.status]
    label = STATUS_LABELS[result.status]
    line = f"[{style}]{label:>10}[/] {result.task_id}"
    if result.status in (BuildStatus.SUCCEEDED, BuildStatus.FAILED):
        line += f" [{theme.DIM}]({format_duration(result.duration_ms)})[/]"
    console.print(line)


def format_failure_details(console: Console, result: BuildResult) -> None:
    """Print a failed task's error and the tool's raw output verbatim."""
    console.print(f"\n[{theme.ERROR_BOLD}]✗ {result.task_id}[/]: {result.error}")
    if result.diagnostics:
        console.print(
            Panel(
                Text(result.diagnostics),
                title="tool output",
                border_style=theme.BORDER_ERROR,
                expand=False,
            )
        )


def format_summary(console: Console, summary: RunSummary) -> None:
    if summary.clean_result is not None:
        clean = summary.clean_result
        if clean.failed:
            format_failure_details(console, clean)
        else:
            console.print(f"[{theme.DIM}]Cleaned {len(clean.outputs)} paths[/]")

    for result in summary.results:
        if result.status == BuildStatus.FAILED:
            format_failure_details(console, result)

    counts = [
        (BuildStatus.SUCCEEDED, "executed"),
        (BuildStatus.SKIPPED_CACHED, "up-to-date"),
        (BuildStatus.FAILED, "failed"),
        (BuildStatus.BLOCKED, "blocked"),
    ]
    parts = [
        f"[{STATUS_STYLES[status]}]{summary.count(status)} {label}[/]"
        for status, label in counts
        if summary.count(status)
    ]

    duration = format_duration(summary.duration_ms)
    console.print()
    if summary.succeeded:
        console.print(f"[{theme.SUCCESS_BOLD}]BUILD SUCCESSFUL[/] in {duration}")
    else:
        console.print(f"[{theme.ERROR_BOLD}]BUILD FAILED[/] in {duration}")
    if parts:
        console.print("  " + ", ".join(parts))


def format_resolved(console: Console, artifacts: list[ResolvedArtifact]) -> None:
    if not artifacts:
        console.print(f"[{theme.DIM}]No dependencies declared.[/]")
        return

    table = Table(title="Resolved dependencies")
    table.add_column("Coordinate", style=theme.TABLE_ID)
    table.add_column("Repository", style=theme.TABLE_VALUE)
    table.add_column("SHA-256", style=theme.TABLE_LABEL)
    table.add_column("Path", style=theme.TABLE_LABEL)
    for artifact in sorted(artifacts, key=lambda a: a.key):
        table.add_row(artifact.key, artifact.repository, artifact.sha256[:16], str(artifact.path))
    console.print(table)


def format_error(console: Console, error: KeelError) -> None:
    console.print(f"\n[{theme.ERROR_BOLD}]Error:[/] {error}")
    if isinstance(error, UnresolvedDependency) and not error.attempted:
        console.print(f"[{theme.DIM}]Declare at least one repository in the configuration.[/]")
