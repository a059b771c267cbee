import asyncio
import os
import sys
from pathlib import Path

import pytest

from src.domain.entities.task_node import TaskNode
from src.domain.errors import ToolchainFailure
from src.domain.value_objects.build_status import BuildStatus, ToolchainCapability
from src.domain.value_objects.task_action import TaskAction
from src.infrastructure.toolchains import create_toolchains
from src.infrastructure.toolchains.cargo_toolchain import CargoToolchain
from src.infrastructure.toolchains.command_toolchain import CommandToolchain
from src.infrastructure.toolchains.external_toolchain import CLASSPATH_ENV
from src.infrastructure.toolchains.gradle_toolchain import GradleToolchain
from src.infrastructure.toolchains.process_runner import run_process


def _task(
    toolchain: str, outputs: tuple[str, ...] = (), timeout_s: int = 60, **params: object
) -> TaskNode:
    return TaskNode(
        id="t",
        inputs=("src",),
        outputs=outputs,
        action=TaskAction(toolchain=toolchain, params=params, timeout_s=timeout_s),
    )


class TestCargoToolchain:
    def test_release_build_for_android_target(self, tmp_path: Path) -> None:
        task = _task(
            "cargo",
            manifest_path="rust/Cargo.toml",
            release=True,
            target="aarch64-linux-android",
            features=["ffi", "log"],
        )

        argv, cwd = CargoToolchain().build_command(task, tmp_path)

        assert argv == [
            "cargo",
            "build",
            "--manifest-path",
            "rust/Cargo.toml",
            "--release",
            "--target",
            "aarch64-linux-android",
            "--features",
            "ffi,log",
        ]
        assert cwd == tmp_path

    def test_profile_takes_precedence_over_release(self, tmp_path: Path) -> None:
        task = _task("cargo", release=True, profile="dist", cwd="rust")

        argv, cwd = CargoToolchain().build_command(task, tmp_path)

        assert argv == ["cargo", "build", "--profile", "dist"]
        assert cwd == tmp_path / "rust"

    def test_invalid_params_raise_failure(self, tmp_path: Path) -> None:
        with pytest.raises(ToolchainFailure) as exc_info:
            CargoToolchain().build_command(_task("cargo", release="sometimes"), tmp_path)

        assert exc_info.value.tool == "cargo"
        assert "release" in exc_info.value.diagnostics


class TestGradleToolchain:
    def test_uses_wrapper_when_present(self, tmp_path: Path) -> None:
        android = tmp_path / "android"
        android.mkdir()
        wrapper = android / ("gradlew.bat" if os.name == "nt" else "gradlew")
        wrapper.write_text("#!/bin/sh\n")

        task = _task(
            "gradle",
            tasks=["assembleRelease"],
            project_dir="android",
            offline=True,
            properties={"versionName": "1.0", "abi": "arm64-v8a"},
        )
        argv, cwd = GradleToolchain().build_command(task, tmp_path)

        assert argv == [
            str(wrapper),
            "assembleRelease",
            "--console=plain",
            "--offline",
            "-Pabi=arm64-v8a",
            "-PversionName=1.0",
        ]
        assert cwd == android

    def test_falls_back_to_gradle(self, tmp_path: Path) -> None:
        argv, _ = GradleToolchain().build_command(_task("gradle", tasks=["clean"]), tmp_path)

        assert argv == ["gradle", "clean", "--console=plain"]

    def test_requires_tasks(self, tmp_path: Path) -> None:
        with pytest.raises(ToolchainFailure):
            GradleToolchain().build_command(_task("gradle", tasks=[]), tmp_path)


class TestCommandToolchain:
    async def test_success_reports_outputs(self, tmp_path: Path) -> None:
        script = (
            "import pathlib; pathlib.Path('out').mkdir(); "
            "pathlib.Path('out/lib.so').write_text('elf')"
        )
        task = _task("command", outputs=("out/lib.so",), argv=[sys.executable, "-c", script])

        result = await CommandToolchain().invoke(task, tmp_path)

        assert result.status == BuildStatus.SUCCEEDED
        assert result.outputs == ["out/lib.so"]
        assert (tmp_path / "out" / "lib.so").read_text() == "elf"

    async def test_failure_keeps_raw_output(self, tmp_path: Path) -> None:
        script = (
            "import sys; print('Compiling keel v0.1.0'); "
            "sys.stderr.write('error[E0425]: cannot find value `x`\\n'); sys.exit(101)"
        )
        task = _task("command", argv=[sys.executable, "-c", script])

        with pytest.raises(ToolchainFailure) as exc_info:
            await CommandToolchain().invoke(task, tmp_path)

        failure = exc_info.value
        assert failure.exit_code == 101
        assert failure.tool == "command"
        assert "Compiling keel v0.1.0" in failure.diagnostics
        assert "error[E0425]: cannot find value `x`" in failure.diagnostics

    async def test_classpath_is_exported(self, tmp_path: Path) -> None:
        script = f"import os; open('cp.txt', 'w').write(os.environ['{CLASSPATH_ENV}'])"
        task = _task("command", argv=[sys.executable, "-c", script])
        jars = [tmp_path / "a.jar", tmp_path / "b.jar"]

        await CommandToolchain().invoke(task, tmp_path, jars)

        assert (tmp_path / "cp.txt").read_text() == os.pathsep.join(str(j) for j in jars)

    async def test_task_env_is_passed(self, tmp_path: Path) -> None:
        task = TaskNode(
            id="t",
            action=TaskAction(
                toolchain="command",
                params={"argv": "sh -c 'printf %s \"$ABI\" > abi.txt'"},
                env={"ABI": "arm64-v8a"},
            ),
        )

        await CommandToolchain().invoke(task, tmp_path)

        assert (tmp_path / "abi.txt").read_text() == "arm64-v8a"

    async def test_missing_executable(self, tmp_path: Path) -> None:
        task = _task("command", argv=["definitely-not-a-real-tool-xyz"])

        with pytest.raises(ToolchainFailure) as exc_info:
            await CommandToolchain().invoke(task, tmp_path)

        assert exc_info.value.exit_code == -1
        assert "definitely-not-a-real-tool-xyz" in exc_info.value.diagnostics

    async def test_timeout(self, tmp_path: Path) -> None:
        task = _task(
            "command", timeout_s=1, argv=[sys.executable, "-c", "import time; time.sleep(30)"]
        )

        with pytest.raises(ToolchainFailure) as exc_info:
            await CommandToolchain().invoke(task, tmp_path)

        assert "Timeout after 1s" in exc_info.value.diagnostics

    async def test_empty_argv_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ToolchainFailure):
            await CommandToolchain().invoke(_task("command", argv=[]), tmp_path)


async def test_run_process_combines_output(tmp_path: Path) -> None:
    script = "import sys; print('out'); sys.stderr.write('err\\n')"

    result = await run_process([sys.executable, "-c", script], cwd=tmp_path)

    assert result.exit_code == 0
    assert result.output == "out\nerr\n"


async def test_cancelled_run_kills_process(tmp_path: Path) -> None:
    pid_file = tmp_path / "pid"
    script = (
        f"import os, pathlib, time; pathlib.Path({str(pid_file)!r}).write_text(str(os.getpid())); "
        "time.sleep(30)"
    )
    running = asyncio.create_task(run_process([sys.executable, "-c", script], cwd=tmp_path))
    for _ in range(200):
        if pid_file.exists() and pid_file.read_text():
            break
        await asyncio.sleep(0.05)

    running.cancel()
    with pytest.raises(asyncio.CancelledError):
        await running

    with pytest.raises(ProcessLookupError):
        os.kill(int(pid_file.read_text()), 0)

def test_create_toolchains() -> None:
    toolchains = create_toolchains()

    assert set(toolchains) == {"cargo", "gradle", "command", "package-command"}
    assert toolchains["cargo"].capability == ToolchainCapability.COMPILE
    assert toolchains["gradle"].capability == ToolchainCapability.PACKAGE
    assert toolchains["package-command"].capability == ToolchainCapability.PACKAGE
