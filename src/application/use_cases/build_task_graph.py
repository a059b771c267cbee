from collections.abc import Mapping

from loguru import logger

from src.application.dto.build_config import BuildConfig
from src.domain.errors import UnknownToolchain
from src.domain.ports.toolchain_port import ToolchainPort
from src.domain.services.task_graph import TaskGraph


class BuildTaskGraph:
    def __init__(self, toolchains: Mapping[str, ToolchainPort]):
        self.toolchains = toolchains

    def execute(self, config: BuildConfig) -> TaskGraph:
        """Create and validate the task graph for the configured tasks.

        Raises:
            UnknownToolchain: a task names a toolchain with no adapter.
            DuplicateTask, AmbiguousOutput, CyclicDependency: invalid graph.
        """
        graph = TaskGraph()
        for declaration in config.tasks:
            if declaration.toolchain not in self.toolchains:
                raise UnknownToolchain(
                    declaration.id, declaration.toolchain, list(self.toolchains)
                )
            graph.add_task(
                declaration.id,
                inputs=declaration.inputs,
                outputs=declaration.outputs,
                action=declaration.to_action(),
                artifacts=declaration.dependencies,
                description=declaration.description,
            )
        graph.build()
        logger.info("Task graph ready: {} tasks", len(graph))
        return graph
