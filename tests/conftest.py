from pathlib import Path

import pytest

from tests.fakes import FakeToolchain


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def temp_state_dir(tmp_path: Path) -> Path:
    state_dir = tmp_path / ".keel"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def fake_toolchain() -> FakeToolchain:
    return FakeToolchain()
