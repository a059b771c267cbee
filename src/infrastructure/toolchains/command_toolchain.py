from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator

from src.domain.entities.task_node import TaskNode
from src.domain.value_objects.build_status import ToolchainCapability
from src.infrastructure.toolchains.external_toolchain import (
    ExternalToolchain,
    resolve_dir,
    string_list,
)


class CommandParams(BaseModel):
    argv: list[str]
    cwd: str | None = None

    @field_validator("argv", mode="before")
    @classmethod
    def _split(cls, value: Any) -> Any:
        if isinstance(value, str | list):
            return string_list(value)
        return value

    @field_validator("argv")
    @classmethod
    def _not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("argv must not be empty")
        return value


class CommandToolchain(ExternalToolchain):
    """Generic variant: runs the argv given in the task parameters."""

    def __init__(
        self,
        name: str = "command",
        capability: ToolchainCapability = ToolchainCapability.COMPILE,
    ) -> None:
        self.name = name
        self.capability = capability

    def build_command(self, task: TaskNode, workdir: Path) -> tuple[list[str], Path]:
        params = self.parse_params(task, CommandParams)
        return params.argv, resolve_dir(workdir, params.cwd)
