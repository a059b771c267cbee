import sys
from pathlib import Path

import typer
from loguru import logger

from src.cli.commands import build, clean, graph, resolve

DEFAULT_LOG_FILE = Path(".keel") / "keel.log"


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> Path:
    """Configure loguru logging and return the log file path."""
    logger.remove()

    file_path = log_file or DEFAULT_LOG_FILE
    file_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        file_path,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="10 MB",
        encoding="utf-8",
    )

    if verbose:
        logger.add(
            sys.stderr,
            format="{time:HH:mm:ss} | {level: <8} | {message}",
            level="DEBUG",
        )
    return file_path


app = typer.Typer(
    name="keel",
    help="keel - multi-toolchain build orchestrator",
    no_args_is_help=True,
)

# Register commands
app.command(name="build")(build.build)
app.command(name="clean")(clean.clean)
app.command(name="resolve")(resolve.resolve)
app.command(name="graph")(graph.graph)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output", is_eager=True),
    log_file: Path | None = typer.Option(None, "--log-file", help="Log file path"),
) -> None:
    """keel - multi-toolchain build orchestrator."""
    setup_logging(verbose=verbose, log_file=log_file)


if __name__ == "__main__":
    app()
