from pathlib import Path

from pydantic import BaseModel

from src.domain.value_objects.coordinate import ArtifactCoordinate


class ResolvedArtifact(BaseModel, frozen=True):
    coordinate: ArtifactCoordinate
    sha256: str
    path: Path
    repository: str

    @property
    def key(self) -> str:
        return self.coordinate.key
