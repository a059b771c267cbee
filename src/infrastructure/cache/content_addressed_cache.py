from __future__ import annotations

import asyncio
import hashlib
from pathlib import Path

from loguru import logger

from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.ports.artifact_cache_port import ArtifactCachePort
from src.domain.services.fingerprint import file_sha256
from src.domain.value_objects.coordinate import ArtifactCoordinate
from src.infrastructure.persistence.atomic_io import atomic_write
from src.infrastructure.persistence.locks import KeyedLock, async_file_lock


class ContentAddressedCache(ArtifactCachePort):
    """Artifact storage at ``<state_dir>/artifacts/<sha256>/<file name>``."""

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir
        self._keys = KeyedLock()

    @property
    def root(self) -> Path:
        return self.state_dir / "artifacts"

    def _entry_dir(self, sha256: str) -> Path:
        return self.root / sha256

    async def store(
        self, coordinate: ArtifactCoordinate, content: bytes, repository: str
    ) -> ResolvedArtifact:
        sha256 = hashlib.sha256(content).hexdigest()
        path = self._entry_dir(sha256) / coordinate.file_name

        async with self._keys.hold(sha256):
            async with async_file_lock(self._entry_dir(sha256).with_suffix(".lock")):
                if not path.exists():
                    await atomic_write(path, content)
                    logger.debug("Cached {} ({} bytes) at {}", coordinate.key, len(content), path)

        return ResolvedArtifact(
            coordinate=coordinate, sha256=sha256, path=path, repository=repository
        )

    async def lookup(
        self, coordinate: ArtifactCoordinate, sha256: str, repository: str
    ) -> ResolvedArtifact | None:
        path = self._entry_dir(sha256) / coordinate.file_name
        async with self._keys.hold(sha256):
            if not path.exists():
                return None
            actual = await asyncio.to_thread(file_sha256, path)
        if actual != sha256:
            logger.warning("Cached artifact {} is corrupt, ignoring it", path)
            return None
        return ResolvedArtifact(
            coordinate=coordinate, sha256=sha256, path=path, repository=repository
        )
