"""End-to-end builds of a sample project through real adapters."""

import shutil
from pathlib import Path

import pytest

from src.cli.runner import create_pipeline
from src.domain.errors import ChecksumMismatch
from src.domain.value_objects.build_status import BuildStatus
from tests.fakes import KOTLIN_PLUGIN_PATH, write_android_project


def _statuses(summary) -> dict[str, BuildStatus]:
    return {r.task_id: r.status for r in summary.results}


async def test_full_build_then_incremental(project_root: Path) -> None:
    config = write_android_project(project_root)

    first = await create_pipeline(config).build()

    assert first.exit_code == 0
    assert [r.task_id for r in first.results] == ["compile", "package"]
    assert _statuses(first) == {"compile": BuildStatus.SUCCEEDED, "package": BuildStatus.SUCCEEDED}
    apk = (project_root / "build" / "app.apk").read_text()
    assert apk.startswith("so:pub fn native() {}|")
    assert apk.endswith("kotlin-gradle-plugin-1.9.10.jar")

    second = await create_pipeline(config).build()

    assert set(_statuses(second).values()) == {BuildStatus.SKIPPED_CACHED}


async def test_changed_app_source_reruns_only_package(project_root: Path) -> None:
    config = write_android_project(project_root)
    await create_pipeline(config).build()

    (project_root / "app" / "src" / "Main.kt").write_text("fun main() { println() }")
    summary = await create_pipeline(config).build()

    assert _statuses(summary) == {
        "compile": BuildStatus.SKIPPED_CACHED,
        "package": BuildStatus.SUCCEEDED,
    }


async def test_changed_native_source_reruns_both(project_root: Path) -> None:
    config = write_android_project(project_root)
    await create_pipeline(config).build()

    (project_root / "rust" / "src" / "lib.rs").write_text("pub fn native2() {}")
    summary = await create_pipeline(config).build()

    assert set(_statuses(summary).values()) == {BuildStatus.SUCCEEDED}
    assert "native2" in (project_root / "build" / "app.apk").read_text()


async def test_clean_build_reruns_everything(project_root: Path) -> None:
    config = write_android_project(project_root)
    await create_pipeline(config).build()

    summary = await create_pipeline(config).build(clean=True)

    assert summary.clean_result is not None
    assert summary.clean_result.status == BuildStatus.SUCCEEDED
    assert "build" in summary.clean_result.outputs
    assert set(_statuses(summary).values()) == {BuildStatus.SUCCEEDED}


async def test_failure_blocks_packaging(project_root: Path) -> None:
    config = write_android_project(project_root, compile_exit=101)

    summary = await create_pipeline(config).build()

    assert summary.exit_code == 1
    assert _statuses(summary) == {"compile": BuildStatus.FAILED, "package": BuildStatus.BLOCKED}
    failed = summary.results[0]
    assert failed.diagnostics == "error: could not compile `native`\n"


async def test_locked_artifact_survives_repository_removal(project_root: Path) -> None:
    config = write_android_project(project_root)
    await create_pipeline(config).build()

    shutil.rmtree(project_root / "m2")
    summary = await create_pipeline(config).build()

    assert summary.exit_code == 0
    assert summary.resolved[0].repository == "vendor"


async def test_changed_remote_artifact_is_rejected(project_root: Path) -> None:
    config = write_android_project(project_root)
    await create_pipeline(config).resolve()

    (project_root / "m2" / KOTLIN_PLUGIN_PATH).write_bytes(b"tampered")
    shutil.rmtree(project_root / ".keel" / "artifacts")

    with pytest.raises(ChecksumMismatch):
        await create_pipeline(config).build()
    assert not (project_root / "build").exists()
