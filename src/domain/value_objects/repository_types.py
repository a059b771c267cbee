from enum import Enum

from pydantic import BaseModel, model_validator


class RepositoryKind(str, Enum):
    LOCAL = "local"
    HTTP = "http"


class RepositoryDeclaration(BaseModel, frozen=True):
    """One entry of the ordered repository list.

    ``url`` is a directory path for LOCAL repositories and a base URL for
    HTTP ones (e.g. ``https://repo.maven.apache.org/maven2``).
    """

    name: str
    kind: RepositoryKind = RepositoryKind.HTTP
    url: str

    @model_validator(mode="after")
    def _check_url(self) -> "RepositoryDeclaration":
        if self.kind == RepositoryKind.HTTP and not self.url.startswith(("http://", "https://")):
            raise ValueError(f"repository '{self.name}': http repository needs an http(s) url")
        return self
