from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from src.domain.entities.build_result import BuildResult
from src.domain.entities.task_node import TaskNode
from src.domain.value_objects.build_status import ToolchainCapability


class ToolchainPort(ABC):
    """Port wrapping one external build tool.

    Implementations translate the generic task action into the tool's
    invocation and return a SUCCEEDED BuildResult. Tool failures are raised
    as ToolchainFailure carrying the raw diagnostics.
    """

    name: str
    capability: ToolchainCapability

    @abstractmethod
    async def invoke(
        self,
        task: TaskNode,
        workdir: Path,
        classpath: Sequence[Path] = (),
    ) -> BuildResult:
        """Run the task's action in ``workdir``.

        ``classpath`` holds local paths of the resolved artifacts the task
        consumes.

        Raises:
            ToolchainFailure: the external tool failed.
        """
