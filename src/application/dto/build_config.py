from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from src.domain.entities.task_node import check_task_id, normalize_paths
from src.domain.value_objects.coordinate import ArtifactCoordinate
from src.domain.value_objects.repository_types import RepositoryDeclaration
from src.domain.value_objects.task_action import TaskAction


class TaskDeclaration(BaseModel, frozen=True):
    id: str
    toolchain: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()
    params: dict[str, Any] = Field(default_factory=dict)
    env: dict[str, str] = Field(default_factory=dict)
    timeout_s: int = Field(default=1800, gt=0)
    # Coordinate keys ("group:artifact:version") of declared dependencies
    dependencies: tuple[str, ...] = ()
    description: str = ""

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        return check_task_id(value)

    @field_validator("inputs", "outputs")
    @classmethod
    def _normalize(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return normalize_paths(value)

    def to_action(self) -> TaskAction:
        return TaskAction(
            toolchain=self.toolchain,
            params=self.params,
            env=self.env,
            timeout_s=self.timeout_s,
        )


class BuildSettings(BaseModel, frozen=True):
    state_dir: str = ".keel"
    fail_fast: bool = False
    jobs: int | None = Field(default=None, ge=1)
    # Extra paths removed by clean, besides every declared task output
    clean_paths: tuple[str, ...] = ()


class BuildConfig(BaseModel, frozen=True):
    """Immutable build configuration, loaded once at startup."""

    project: str = "keel-project"
    variables: dict[str, str] = Field(default_factory=dict)
    repositories: tuple[RepositoryDeclaration, ...] = ()
    dependencies: tuple[ArtifactCoordinate, ...] = ()
    tasks: tuple[TaskDeclaration, ...] = ()
    settings: BuildSettings = Field(default_factory=BuildSettings)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _parse_notation(cls, value: Any) -> Any:
        if not isinstance(value, list | tuple):
            return value
        return [ArtifactCoordinate.parse(v) if isinstance(v, str) else v for v in value]

    @model_validator(mode="after")
    def _check_references(self) -> "BuildConfig":
        names = [r.name for r in self.repositories]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate repository names: {', '.join(duplicates)}")

        known_repos = set(names)
        for coordinate in self.dependencies:
            unknown = [r for r in coordinate.repositories if r not in known_repos]
            if unknown:
                raise ValueError(
                    f"dependency {coordinate.key} references unknown repositories: "
                    f"{', '.join(unknown)}"
                )

        declared = {c.key for c in self.dependencies}
        for task in self.tasks:
            missing = [d for d in task.dependencies if d not in declared]
            if missing:
                raise ValueError(
                    f"task '{task.id}' uses undeclared dependencies: {', '.join(missing)}"
                )
        return self
