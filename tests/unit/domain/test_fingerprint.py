from pathlib import Path

from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.entities.task_node import TaskNode
from src.domain.services.fingerprint import compute_fingerprint, missing_outputs, outputs_exist
from src.domain.value_objects.coordinate import ArtifactCoordinate
from src.domain.value_objects.task_action import TaskAction


def _task(**overrides: object) -> TaskNode:
    data: dict[str, object] = {
        "id": "compile",
        "inputs": ("src",),
        "outputs": ("build/lib.so",),
        "action": TaskAction(toolchain="cargo", params={"release": True}),
    }
    data.update(overrides)
    return TaskNode.model_validate(data)


class TestComputeFingerprint:
    def test_stable_for_unchanged_inputs(self, project_root: Path) -> None:
        (project_root / "src").mkdir()
        (project_root / "src" / "lib.rs").write_text("fn main() {}")
        task = _task()

        first = compute_fingerprint(task, project_root, {})
        second = compute_fingerprint(task, project_root, {})

        assert first == second
        assert first.startswith("sha256:")

    def test_changes_when_input_content_changes(self, project_root: Path) -> None:
        (project_root / "src").mkdir()
        source = project_root / "src" / "lib.rs"
        source.write_text("fn main() {}")
        task = _task()
        before = compute_fingerprint(task, project_root, {})

        source.write_text("fn main() { println!(); }")

        assert compute_fingerprint(task, project_root, {}) != before

    def test_changes_when_file_added_to_input_directory(self, project_root: Path) -> None:
        (project_root / "src").mkdir()
        (project_root / "src" / "lib.rs").write_text("x")
        task = _task()
        before = compute_fingerprint(task, project_root, {})

        (project_root / "src" / "extra.rs").write_text("y")

        assert compute_fingerprint(task, project_root, {}) != before

    def test_missing_input_differs_from_empty_file(self, project_root: Path) -> None:
        task = _task(inputs=("config.toml",))
        missing = compute_fingerprint(task, project_root, {})

        (project_root / "config.toml").write_text("")

        assert compute_fingerprint(task, project_root, {}) != missing

    def test_action_params_are_part_of_fingerprint(self, project_root: Path) -> None:
        release = _task()
        debug = _task(action=TaskAction(toolchain="cargo", params={"release": False}))

        assert compute_fingerprint(release, project_root, {}) != compute_fingerprint(
            debug, project_root, {}
        )

    def test_timeout_is_not_part_of_fingerprint(self, project_root: Path) -> None:
        short = _task(action=TaskAction(toolchain="cargo", params={"release": True}, timeout_s=5))

        assert compute_fingerprint(short, project_root, {}) == compute_fingerprint(
            _task(), project_root, {}
        )

    def test_artifact_hash_is_part_of_fingerprint(self, project_root: Path) -> None:
        coordinate = ArtifactCoordinate(name="org.jetbrains.kotlin:kotlin-stdlib", version="1.9.10")
        task = _task(artifacts=(coordinate.key,))

        def artifact(sha: str) -> dict[str, ResolvedArtifact]:
            resolved = ResolvedArtifact(
                coordinate=coordinate, sha256=sha, path=project_root / "x.jar", repository="central"
            )
            return {coordinate.key: resolved}

        assert compute_fingerprint(task, project_root, artifact("a" * 64)) != compute_fingerprint(
            task, project_root, artifact("b" * 64)
        )


class TestOutputs:
    def test_missing_outputs_listed(self, project_root: Path) -> None:
        task = _task(outputs=("build/lib.so", "build/lib.h"))
        (project_root / "build").mkdir()
        (project_root / "build" / "lib.h").write_text("")

        assert not outputs_exist(task, project_root)
        assert missing_outputs(task, project_root) == ["build/lib.so"]

    def test_all_outputs_present(self, project_root: Path) -> None:
        task = _task(outputs=("lib.so",))
        (project_root / "lib.so").write_text("")

        assert outputs_exist(task, project_root)
        assert missing_outputs(task, project_root) == []
