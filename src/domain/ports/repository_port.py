from abc import ABC, abstractmethod

from src.domain.value_objects.coordinate import ArtifactCoordinate


class RepositoryUnavailable(Exception):
    """Raised by a repository that cannot be reached or answers with an error."""


class RepositoryPort(ABC):
    """Port for one artifact repository."""

    name: str

    @abstractmethod
    async def fetch(self, coordinate: ArtifactCoordinate) -> bytes | None:
        """Return artifact content, or None if the repository does not have it.

        Raises:
            RepositoryUnavailable: the repository could not be queried.
        """
