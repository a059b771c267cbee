import asyncio
from pathlib import Path

import aiofiles
from loguru import logger

from src.domain.ports.repository_port import RepositoryPort, RepositoryUnavailable
from src.domain.value_objects.coordinate import ArtifactCoordinate


class LocalRepository(RepositoryPort):
    """Maven directory layout on the local filesystem."""

    def __init__(self, name: str, root: Path) -> None:
        self.name = name
        self.root = root

    async def fetch(self, coordinate: ArtifactCoordinate) -> bytes | None:
        if not await asyncio.to_thread(self.root.is_dir):
            raise RepositoryUnavailable(f"repository directory {self.root} does not exist")

        path = self.root / coordinate.layout_path()
        if not path.is_file():
            logger.debug("[{}] {} not found at {}", self.name, coordinate.key, path)
            return None

        async with aiofiles.open(path, mode="rb") as f:
            return await f.read()
