from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from src.domain.errors import LockfileError
from src.domain.ports.lockfile_port import LockedArtifact, LockfilePort
from src.infrastructure.persistence.atomic_io import atomic_write, read_json
from src.infrastructure.persistence.locks import async_file_lock


class JsonLockfileStore(LockfilePort):
    """Lockfile stored as ``<state_dir>/keel.lock.json``."""

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir

    @property
    def path(self) -> Path:
        return self.state_dir / "keel.lock.json"

    async def load(self) -> dict[str, LockedArtifact]:
        """Return the locked entries, or an empty mapping without a lockfile.

        Raises:
            LockfileError: the file is not valid JSON or not a lockfile.
        """
        try:
            data = await read_json(self.path)
        except ValueError as e:
            raise LockfileError(str(self.path), f"invalid JSON: {e}") from e
        if data is None:
            return {}

        artifacts = data.get("artifacts", {}) if isinstance(data, dict) else None
        if not isinstance(artifacts, dict):
            raise LockfileError(str(self.path), "expected an object with an 'artifacts' map")
        entries: dict[str, LockedArtifact] = {}
        for key, entry in artifacts.items():
            try:
                entries[key] = LockedArtifact.model_validate(entry)
            except ValidationError as e:
                raise LockfileError(str(self.path), _format_errors(key, e)) from None
        return entries

    async def save(self, entries: dict[str, LockedArtifact]) -> None:
        payload = {
            "artifacts": {key: entries[key].model_dump() for key in sorted(entries)},
        }
        async with async_file_lock(self.state_dir / ".lockfile.lock"):
            await atomic_write(self.path, json.dumps(payload, indent=2) + "\n")
        logger.info("Wrote lockfile with {} artifacts: {}", len(entries), self.path)


def _format_errors(key: str, error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(p) for p in item['loc']) or 'entry'}: {item['msg']}"
        for item in error.errors()
    )
    return f"{key}: {details}"
