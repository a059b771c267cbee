"""Error taxonomy for keel.

Resolution, configuration and graph errors are raised before any task
executes. ToolchainFailure is raised by adapters and recorded by the
orchestrator as a failed BuildResult.
"""


class KeelError(Exception):
    """Base class for all keel errors."""


class ConfigError(KeelError):
    """Raised when the build configuration cannot be loaded or validated."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid configuration {path}: {detail}")


class UnresolvedDependency(KeelError):
    """Raised when no repository provides a coordinate."""

    def __init__(self, coordinate: str, attempted: list[str], reasons: list[str] | None = None):
        self.coordinate = coordinate
        self.attempted = attempted
        self.reasons = reasons or []
        tried = ", ".join(attempted) if attempted else "no repositories"
        message = f"Could not resolve {coordinate}. Searched in order: {tried}"
        if self.reasons:
            message += "\n" + "\n".join(f"  - {r}" for r in self.reasons)
        super().__init__(message)


class ChecksumMismatch(KeelError):
    """Raised when a fetched artifact does not match its locked hash."""

    def __init__(self, coordinate: str, expected: str, actual: str, repository: str) -> None:
        self.coordinate = coordinate
        self.expected = expected
        self.actual = actual
        self.repository = repository
        super().__init__(
            f"Checksum mismatch for {coordinate} from '{repository}': "
            f"locked {expected}, fetched {actual}"
        )


class LockfileError(KeelError):
    """Raised when the lockfile exists but cannot be read."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Unreadable lockfile {path}: {detail}")


class DuplicateTask(KeelError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' is declared more than once")


class AmbiguousOutput(KeelError):
    """Raised when two tasks declare the same output."""

    def __init__(self, output: str, producers: list[str]) -> None:
        self.output = output
        self.producers = producers
        super().__init__(
            f"Output '{output}' is declared by more than one task: {', '.join(producers)}"
        )


class CyclicDependency(KeelError):
    """Raised when the task graph has no topological order."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        path = " -> ".join([*cycle, cycle[0]]) if cycle else ""
        super().__init__(f"Cyclic dependency between tasks: {path}")


class UnknownToolchain(KeelError):
    def __init__(self, task_id: str, toolchain: str, known: list[str]) -> None:
        self.task_id = task_id
        self.toolchain = toolchain
        self.known = known
        super().__init__(
            f"Task '{task_id}' uses unknown toolchain '{toolchain}'. "
            f"Available: {', '.join(sorted(known))}"
        )


class ToolchainFailure(KeelError):
    """Raised by an adapter when the external tool fails.

    ``diagnostics`` is the tool's raw output, kept verbatim.
    """

    def __init__(self, task_id: str, tool: str, exit_code: int, diagnostics: str) -> None:
        self.task_id = task_id
        self.tool = tool
        self.exit_code = exit_code
        self.diagnostics = diagnostics
        super().__init__(f"{tool} failed for task '{task_id}' (exit code {exit_code})")
