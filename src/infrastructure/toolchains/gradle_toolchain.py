import os
from pathlib import Path

from pydantic import BaseModel, Field

from src.domain.entities.task_node import TaskNode
from src.domain.value_objects.build_status import ToolchainCapability
from src.infrastructure.toolchains.external_toolchain import ExternalToolchain, resolve_dir


class GradleParams(BaseModel):
    tasks: list[str] = Field(min_length=1)
    project_dir: str | None = None
    use_wrapper: bool = True
    gradle: str = "gradle"
    offline: bool = False
    properties: dict[str, str] = {}
    extra_args: list[str] = []


class GradleToolchain(ExternalToolchain):
    """Packaging variant: Android application assembled by Gradle.

    Runs ``./gradlew`` from the project directory when the wrapper exists and
    ``use_wrapper`` is set, otherwise the ``gradle`` executable.
    """

    name = "gradle"
    capability = ToolchainCapability.PACKAGE

    def build_command(self, task: TaskNode, workdir: Path) -> tuple[list[str], Path]:
        params = self.parse_params(task, GradleParams)
        project_dir = resolve_dir(workdir, params.project_dir)

        wrapper = project_dir / ("gradlew.bat" if os.name == "nt" else "gradlew")
        executable = str(wrapper) if params.use_wrapper and wrapper.is_file() else params.gradle

        argv = [executable, *params.tasks, "--console=plain"]
        if params.offline:
            argv.append("--offline")
        argv += [f"-P{key}={value}" for key, value in sorted(params.properties.items())]
        argv += params.extra_args

        return argv, project_dir
