from abc import ABC, abstractmethod

from pydantic import BaseModel


class LockedArtifact(BaseModel, frozen=True):
    repository: str
    sha256: str


class LockfilePort(ABC):
    """Port for the record of resolved coordinates between runs."""

    @abstractmethod
    async def load(self) -> dict[str, LockedArtifact]:
        """Return locked entries by coordinate key (empty if no lockfile)."""

    @abstractmethod
    async def save(self, entries: dict[str, LockedArtifact]) -> None:
        """Replace the lockfile content."""
