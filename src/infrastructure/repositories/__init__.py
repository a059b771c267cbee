from pathlib import Path

from src.domain.ports.repository_port import RepositoryPort
from src.domain.value_objects.repository_types import RepositoryDeclaration, RepositoryKind
from src.infrastructure.repositories.http_repository import HttpRepository
from src.infrastructure.repositories.local_repository import LocalRepository


def create_repository(declaration: RepositoryDeclaration, project_root: Path) -> RepositoryPort:
    """Create a repository adapter for one declared repository.

    Relative local paths are resolved against the project root.
    """
    match declaration.kind:
        case RepositoryKind.LOCAL:
            root = Path(declaration.url).expanduser()
            if not root.is_absolute():
                root = project_root / root
            return LocalRepository(declaration.name, root)

        case RepositoryKind.HTTP:
            return HttpRepository(declaration.name, declaration.url)

        case _:
            raise ValueError(f"Unsupported repository kind: {declaration.kind}")


__all__ = ["HttpRepository", "LocalRepository", "create_repository"]
