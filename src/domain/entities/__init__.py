from src.domain.entities.build_result import BuildResult
from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.entities.task_node import TaskNode

__all__ = [
    "BuildResult",
    "ResolvedArtifact",
    "TaskNode",
]
