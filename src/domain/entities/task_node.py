import posixpath

from pydantic import BaseModel, field_validator

from src.domain.value_objects.task_action import TaskAction


def check_task_id(task_id: str) -> str:
    if not task_id or task_id.strip() != task_id:
        raise ValueError(f"invalid task id '{task_id}'")
    return task_id


def normalize_paths(paths: tuple[str, ...]) -> tuple[str, ...]:
    """Normalize and de-duplicate declared paths, keeping their order."""
    return tuple(dict.fromkeys(normalize_path(p) for p in paths))


def normalize_path(path: str) -> str:
    """Normalize a declared input/output path so overlap checks are exact."""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    if normalized in ("", "."):
        raise ValueError(f"invalid path '{path}'")
    return normalized


class TaskNode(BaseModel):
    """A unit of work in the task graph.

    Inputs and outputs are paths relative to the project root. ``artifacts``
    lists coordinate keys (``group:artifact:version``) of resolved
    dependencies the task consumes. ``fingerprint`` holds the last recorded
    input fingerprint and is updated after each successful execution.
    """

    id: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()
    action: TaskAction
    artifacts: tuple[str, ...] = ()
    description: str = ""
    fingerprint: str | None = None

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        return check_task_id(value)

    @field_validator("inputs", "outputs")
    @classmethod
    def _normalize(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return normalize_paths(value)

    def record_fingerprint(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint

    def reset_fingerprint(self) -> None:
        self.fingerprint = None
