from pydantic import BaseModel, field_validator


class ArtifactCoordinate(BaseModel, frozen=True):
    """External dependency identifier.

    ``name`` follows the ``group:artifact`` convention used by Maven style
    repositories. ``repositories`` optionally restricts and reorders the
    repositories queried for this coordinate; empty means the global order.
    """

    name: str
    version: str
    repositories: tuple[str, ...] = ()
    extension: str = "jar"

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        parts = value.split(":")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"coordinate name must be 'group:artifact', got '{value}'")
        return value

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("coordinate version must not be empty")
        return value

    @property
    def key(self) -> str:
        return f"{self.name}:{self.version}"

    @property
    def group(self) -> str:
        return self.name.split(":", 1)[0]

    @property
    def artifact(self) -> str:
        return self.name.split(":", 1)[1]

    @property
    def file_name(self) -> str:
        return f"{self.artifact}-{self.version}.{self.extension}"

    def layout_path(self) -> str:
        """Relative path of the artifact in a Maven directory layout."""
        return "/".join([*self.group.split("."), self.artifact, self.version, self.file_name])

    @classmethod
    def parse(cls, notation: str) -> "ArtifactCoordinate":
        """Parse ``group:artifact:version`` notation."""
        parts = notation.split(":")
        if len(parts) != 3:
            raise ValueError(f"expected 'group:artifact:version', got '{notation}'")
        return cls(name=f"{parts[0]}:{parts[1]}", version=parts[2])
