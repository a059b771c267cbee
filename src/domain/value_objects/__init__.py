from src.domain.value_objects.build_status import BuildStatus, ToolchainCapability, is_success
from src.domain.value_objects.coordinate import ArtifactCoordinate
from src.domain.value_objects.repository_types import RepositoryDeclaration, RepositoryKind
from src.domain.value_objects.task_action import TaskAction

__all__ = [
    "ArtifactCoordinate",
    "BuildStatus",
    "RepositoryDeclaration",
    "RepositoryKind",
    "TaskAction",
    "ToolchainCapability",
    "is_success",
]
