import hashlib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.entities.task_node import TaskNode

_CHUNK_SIZE = 1024 * 1024


def file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def _hash_input(digest: Any, root: Path, relative: str) -> None:
    path = root / relative
    if path.is_file():
        digest.update(f"file\0{relative}\0{file_sha256(path)}\n".encode())
    elif path.is_dir():
        digest.update(f"dir\0{relative}\n".encode())
        for child in sorted(p for p in path.rglob("*") if p.is_file()):
            child_rel = child.relative_to(root).as_posix()
            digest.update(f"file\0{child_rel}\0{file_sha256(child)}\n".encode())
    else:
        digest.update(f"missing\0{relative}\n".encode())


def compute_fingerprint(
    task: TaskNode,
    root: Path,
    artifacts: Mapping[str, ResolvedArtifact],
) -> str:
    """Hash a task's action, declared paths, input contents and consumed artifacts.

    Blocking: reads every input file. Call through ``asyncio.to_thread``.
    """
    digest = hashlib.sha256()
    digest.update(f"action\0{task.action.identity()}\n".encode())
    for output in sorted(task.outputs):
        digest.update(f"output\0{output}\n".encode())
    for relative in sorted(task.inputs):
        _hash_input(digest, root, relative)
    for key in sorted(task.artifacts):
        resolved = artifacts.get(key)
        sha = resolved.sha256 if resolved else "unresolved"
        digest.update(f"artifact\0{key}\0{sha}\n".encode())
    return f"sha256:{digest.hexdigest()}"


def outputs_exist(task: TaskNode, root: Path) -> bool:
    return all((root / output).exists() for output in task.outputs)


def missing_outputs(task: TaskNode, root: Path) -> list[str]:
    return [output for output in task.outputs if not (root / output).exists()]
