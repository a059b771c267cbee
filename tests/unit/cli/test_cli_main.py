import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from src.cli.main import app, setup_logging
from tests.fakes import write_android_project

runner = CliRunner()


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "keel.log"


def _invoke(log_file: Path, *args: str):
    return runner.invoke(app, ["--log-file", str(log_file), *args])


class TestSetupLogging:
    def test_creates_log_directory(self, tmp_path: Path) -> None:
        path = setup_logging(log_file=tmp_path / "nested" / "keel.log")

        assert path == tmp_path / "nested" / "keel.log"
        assert path.parent.is_dir()

    def test_default_log_file_is_under_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        path = setup_logging()

        assert path == Path(".keel") / "keel.log"
        assert (tmp_path / ".keel").is_dir()


class TestBuildCommand:
    def test_build_then_up_to_date(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root)

        first = _invoke(log_file, "build", "--config", str(config))
        assert first.exit_code == 0, first.output
        assert "BUILD SUCCESSFUL" in first.output
        assert (project_root / "build" / "app.apk").is_file()

        second = _invoke(log_file, "build", "--config", str(config))
        assert second.exit_code == 0, second.output
        assert "2 up-to-date" in second.output

    def test_failing_task_exits_1(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root, compile_exit=101)

        result = _invoke(log_file, "build", "--config", str(config))

        assert result.exit_code == 1
        assert "BUILD FAILED" in result.output
        assert "could not compile" in result.output
        assert not (project_root / "build" / "app.apk").exists()

    def test_invalid_config_exits_2(self, project_root: Path, log_file: Path) -> None:
        config = project_root / "keel.json"
        config.write_text(json.dumps({"tasks": [{"id": "x"}]}))

        result = _invoke(log_file, "build", "--config", str(config))

        assert result.exit_code == 2
        assert "tasks.0.toolchain" in result.output

    def test_invalid_task_output_exits_2(self, project_root: Path, log_file: Path) -> None:
        config = project_root / "keel.json"
        task = {"id": "wipe", "toolchain": "command", "outputs": ["."]}
        config.write_text(json.dumps({"tasks": [task]}))

        result = _invoke(log_file, "build", "--config", str(config))

        assert result.exit_code == 2
        assert "invalid path" in result.output

    def test_corrupt_fingerprints_rebuild(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root)
        assert _invoke(log_file, "build", "--config", str(config)).exit_code == 0
        (project_root / ".keel" / "fingerprints.json").write_text("{truncated")

        result = _invoke(log_file, "build", "--config", str(config))

        assert result.exit_code == 0, result.output
        assert "2 executed" in result.output

    def test_unreadable_lockfile_exits_2(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root)
        (project_root / ".keel").mkdir()
        (project_root / ".keel" / "keel.lock.json").write_text("[]")

        result = _invoke(log_file, "build", "--config", str(config))

        assert result.exit_code == 2
        assert "Unreadable lockfile" in result.output
        assert not (project_root / "build").exists()

    def test_unresolved_dependency_exits_2(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root)
        for jar in (project_root / "m2").rglob("*.jar"):
            jar.unlink()

        result = _invoke(log_file, "build", "--config", str(config))

        assert result.exit_code == 2
        assert not (project_root / "build").exists()

    def test_unknown_toolchain_exits_2(self, project_root: Path, log_file: Path) -> None:
        config = project_root / "keel.json"
        config.write_text(json.dumps({"tasks": [{"id": "x", "toolchain": "ndk-build"}]}))

        result = _invoke(log_file, "build", "--config", str(config))

        assert result.exit_code == 2
        assert "ndk-build" in result.output


class TestOtherCommands:
    def test_graph_prints_execution_order(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root)

        result = _invoke(log_file, "graph", "--config", str(config))

        assert result.exit_code == 0, result.output
        assert result.output.index("compile") < result.output.index("package")

    def test_resolve_writes_lockfile(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root)

        result = _invoke(log_file, "resolve", "--config", str(config))

        assert result.exit_code == 0, result.output
        assert "vendor" in result.output
        lock = json.loads((project_root / ".keel" / "keel.lock.json").read_text())
        assert "org.jetbrains.kotlin:kotlin-gradle-plugin:1.9.10" in lock["artifacts"]

    def test_clean_removes_outputs(self, project_root: Path, log_file: Path) -> None:
        config = write_android_project(project_root)
        assert _invoke(log_file, "build", "--config", str(config)).exit_code == 0

        result = _invoke(log_file, "clean", "--config", str(config))

        assert result.exit_code == 0, result.output
        assert not (project_root / "build").exists()
