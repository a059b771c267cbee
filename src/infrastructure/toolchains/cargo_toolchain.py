from pathlib import Path

from pydantic import BaseModel

from src.domain.entities.task_node import TaskNode
from src.domain.value_objects.build_status import ToolchainCapability
from src.infrastructure.toolchains.external_toolchain import ExternalToolchain, resolve_dir


class CargoParams(BaseModel):
    cargo: str = "cargo"
    command: str = "build"
    manifest_path: str | None = None
    release: bool = False
    profile: str | None = None
    target: str | None = None
    features: list[str] = []
    all_features: bool = False
    no_default_features: bool = False
    cwd: str | None = None
    extra_args: list[str] = []


class CargoToolchain(ExternalToolchain):
    """Native compiler variant: Rust crates built with cargo."""

    name = "cargo"
    capability = ToolchainCapability.COMPILE

    def build_command(self, task: TaskNode, workdir: Path) -> tuple[list[str], Path]:
        params = self.parse_params(task, CargoParams)

        argv = [params.cargo, params.command]
        if params.manifest_path:
            argv += ["--manifest-path", params.manifest_path]
        if params.profile:
            argv += ["--profile", params.profile]
        elif params.release:
            argv.append("--release")
        if params.target:
            argv += ["--target", params.target]
        if params.all_features:
            argv.append("--all-features")
        elif params.features:
            argv += ["--features", ",".join(params.features)]
        if params.no_default_features:
            argv.append("--no-default-features")
        argv += params.extra_args

        return argv, resolve_dir(workdir, params.cwd)
