import os
import shlex
from abc import abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from src.domain.entities.build_result import BuildResult
from src.domain.entities.task_node import TaskNode
from src.domain.errors import ToolchainFailure
from src.domain.ports.toolchain_port import ToolchainPort
from src.domain.value_objects.build_status import BuildStatus
from src.infrastructure.toolchains.process_runner import run_process

ParamsT = TypeVar("ParamsT", bound=BaseModel)

CLASSPATH_ENV = "KEEL_CLASSPATH"


class ExternalToolchain(ToolchainPort):
    """Base for adapters that run one external process per task.

    Subclasses build the argv and working directory from the task action.
    A non-zero exit, a timeout or a spawn error raises ToolchainFailure with
    the tool's raw output.
    """

    @abstractmethod
    def build_command(self, task: TaskNode, workdir: Path) -> tuple[list[str], Path]:
        """Return (argv, cwd) for the task."""

    def parse_params(self, task: TaskNode, model: type[ParamsT]) -> ParamsT:
        try:
            return model.model_validate(task.action.params)
        except ValidationError as e:
            raise ToolchainFailure(task.id, self.name, -1, str(e)) from e

    async def invoke(
        self,
        task: TaskNode,
        workdir: Path,
        classpath: Sequence[Path] = (),
    ) -> BuildResult:
        argv, cwd = self.build_command(task, workdir)
        env = dict(task.action.env)
        if classpath:
            env[CLASSPATH_ENV] = os.pathsep.join(str(p) for p in classpath)

        logger.info("[{}] {}: {}", self.name, task.id, shlex.join(argv))
        try:
            result = await run_process(argv, cwd=cwd, env=env, timeout_s=task.action.timeout_s)
        except OSError as e:
            raise ToolchainFailure(task.id, self.name, -1, f"{argv[0]}: {e}") from e

        if result.stdout:
            logger.debug("[{}] {} stdout:\n{}", self.name, task.id, result.stdout)
        if result.exit_code != 0:
            raise ToolchainFailure(task.id, self.name, result.exit_code, result.output)

        return BuildResult(
            task_id=task.id,
            status=BuildStatus.SUCCEEDED,
            outputs=list(task.outputs),
            duration_ms=result.duration_ms,
        )


def resolve_dir(workdir: Path, value: str | None) -> Path:
    if not value:
        return workdir
    path = Path(value)
    return path if path.is_absolute() else workdir / path


def string_list(value: Any) -> list[str]:
    """Accept either a list of strings or a shell-style string."""
    if isinstance(value, str):
        return shlex.split(value)
    return [str(v) for v in value]
