from src.application.use_cases.build_task_graph import BuildTaskGraph
from src.application.use_cases.resolve_dependencies import DependencyResolver

__all__ = [
    "BuildTaskGraph",
    "DependencyResolver",
]
