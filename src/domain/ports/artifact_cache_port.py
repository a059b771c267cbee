from abc import ABC, abstractmethod

from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.value_objects.coordinate import ArtifactCoordinate


class ArtifactCachePort(ABC):
    """Port for content-addressed artifact storage."""

    @abstractmethod
    async def store(
        self, coordinate: ArtifactCoordinate, content: bytes, repository: str
    ) -> ResolvedArtifact:
        """Store content under its hash and return the resolved artifact."""

    @abstractmethod
    async def lookup(
        self, coordinate: ArtifactCoordinate, sha256: str, repository: str
    ) -> ResolvedArtifact | None:
        """Return a previously stored artifact with the given hash, if any."""
