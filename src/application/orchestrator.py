import asyncio
import heapq
import os
import shutil
import time
from collections.abc import Callable, Mapping
from pathlib import Path

from loguru import logger

from src.domain.entities.build_result import BuildResult
from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.entities.task_node import TaskNode
from src.domain.errors import ToolchainFailure, UnknownToolchain
from src.domain.ports.fingerprint_store_port import FingerprintStorePort
from src.domain.ports.toolchain_port import ToolchainPort
from src.domain.services.fingerprint import compute_fingerprint, missing_outputs, outputs_exist
from src.domain.services.task_graph import TaskGraph
from src.domain.value_objects.build_status import BuildStatus
from src.domain.value_objects.task_action import TaskAction

# Called with each BuildResult as soon as the task finishes
ResultCallback = Callable[[BuildResult], None]

# Called with the task id when a task starts executing
StartCallback = Callable[[str], None]

CLEAN_TASK_ID = "clean"

__all__ = [
    "CLEAN_TASK_ID",
    "Orchestrator",
    "ResultCallback",
    "StartCallback",
    "default_jobs",
]


def default_jobs() -> int:
    return os.cpu_count() or 1


class Orchestrator:
    """Executes a TaskGraph through toolchain adapters.

    Tasks run leaves first on a bounded pool of ``jobs`` concurrent slots; a
    task starts only after every producer of its inputs succeeded. A task
    whose fingerprint matches the stored one and whose outputs all exist is
    reported SKIPPED_CACHED without invoking its toolchain.

    Failure policy:
    - default: siblings keep running, transitive dependents are BLOCKED
    - fail_fast: nothing new starts after the first failure, in-flight tasks
      are awaited and the partial results returned
    """

    def __init__(
        self,
        toolchains: Mapping[str, ToolchainPort],
        fingerprints: FingerprintStorePort,
        project_root: Path,
        artifacts: Mapping[str, ResolvedArtifact] | None = None,
        jobs: int | None = None,
        fail_fast: bool = False,
        on_start: StartCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        self.toolchains = toolchains
        self.fingerprints = fingerprints
        self.project_root = project_root
        self.artifacts = dict(artifacts or {})
        self.jobs = jobs or default_jobs()
        self.fail_fast = fail_fast
        self.on_start = on_start
        self.on_result = on_result

    def _check_toolchains(self, graph: TaskGraph) -> None:
        for node in graph:
            if node.action.toolchain not in self.toolchains:
                raise UnknownToolchain(node.id, node.action.toolchain, list(self.toolchains))

    async def run(self, graph: TaskGraph) -> list[BuildResult]:
        """Execute the graph and return results in topological order.

        Graph and toolchain errors are raised before any task starts.
        """
        if not graph.is_built:
            graph.build()
        self._check_toolchains(graph)

        order = graph.order
        position = {task_id: i for i, task_id in enumerate(order)}
        remaining = {task_id: len(graph.dependencies_of(task_id)) for task_id in order}
        ready = [(position[t], t) for t in order if remaining[t] == 0]
        heapq.heapify(ready)

        results: dict[str, BuildResult] = {}
        in_flight: dict[asyncio.Task[BuildResult], str] = {}
        stopped = False

        logger.info(
            "Running {} tasks with {} jobs (fail_fast={})", len(order), self.jobs, self.fail_fast
        )
        try:
            while ready or in_flight:
                while ready and not stopped and len(in_flight) < self.jobs:
                    _, task_id = heapq.heappop(ready)
                    task = asyncio.create_task(self._execute(graph.get(task_id)))
                    in_flight[task] = task_id

                if not in_flight:
                    break

                done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
                for finished in done:
                    task_id = in_flight.pop(finished)
                    result = finished.result()
                    self._record(results, result)

                    if result.status == BuildStatus.FAILED:
                        if self.fail_fast:
                            if not stopped:
                                logger.warning(
                                    "Task {} failed, fail-fast: not scheduling new tasks", task_id
                                )
                            stopped = True
                        else:
                            self._block_dependents(graph, task_id, position, results)
                        continue

                    for dependent in graph.dependents_of(task_id):
                        remaining[dependent] -= 1
                        if remaining[dependent] == 0 and dependent not in results:
                            heapq.heappush(ready, (position[dependent], dependent))
        except BaseException:
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            raise

        return [results[t] for t in order if t in results]

    def _record(self, results: dict[str, BuildResult], result: BuildResult) -> None:
        results[result.task_id] = result
        if self.on_result is not None:
            self.on_result(result)

    def _block_dependents(
        self,
        graph: TaskGraph,
        failed_id: str,
        position: dict[str, int],
        results: dict[str, BuildResult],
    ) -> None:
        for dependent in sorted(graph.transitive_dependents(failed_id), key=position.__getitem__):
            if dependent in results:
                continue
            logger.info("Task {} blocked by failed task {}", dependent, failed_id)
            self._record(
                results,
                BuildResult(
                    task_id=dependent,
                    status=BuildStatus.BLOCKED,
                    error=f"not run: upstream task '{failed_id}' failed",
                ),
            )

    def _classpath(self, node: TaskNode) -> list[Path]:
        return [self.artifacts[key].path for key in node.artifacts if key in self.artifacts]

    async def _execute(self, node: TaskNode) -> BuildResult:
        start = time.monotonic()

        def elapsed_ms() -> int:
            return int((time.monotonic() - start) * 1000)

        fingerprint = await asyncio.to_thread(
            compute_fingerprint, node, self.project_root, self.artifacts
        )

        # Tasks without inputs always execute
        if node.inputs:
            stored = await self.fingerprints.get(node.id)
            if stored == fingerprint and outputs_exist(node, self.project_root):
                node.record_fingerprint(fingerprint)
                logger.info("Task {} is up to date", node.id)
                return BuildResult(
                    task_id=node.id,
                    status=BuildStatus.SKIPPED_CACHED,
                    outputs=list(node.outputs),
                    duration_ms=elapsed_ms(),
                )

        if self.on_start is not None:
            self.on_start(node.id)

        toolchain = self.toolchains[node.action.toolchain]
        try:
            result = await toolchain.invoke(node, self.project_root, self._classpath(node))
        except ToolchainFailure as e:
            logger.error("Task {} failed: {}", node.id, e)
            return BuildResult(
                task_id=node.id,
                status=BuildStatus.FAILED,
                error=str(e),
                diagnostics=e.diagnostics,
                duration_ms=elapsed_ms(),
            )

        missing = missing_outputs(node, self.project_root)
        if missing:
            logger.error("Task {} did not produce {}", node.id, missing)
            return BuildResult(
                task_id=node.id,
                status=BuildStatus.FAILED,
                error=f"declared outputs not produced: {', '.join(missing)}",
                diagnostics=result.diagnostics,
                duration_ms=elapsed_ms(),
            )

        await self.fingerprints.record(node.id, fingerprint)
        node.record_fingerprint(fingerprint)
        logger.info("Task {} succeeded in {}ms", node.id, elapsed_ms())
        return result.model_copy(update={"duration_ms": elapsed_ms()})

    async def clean(self, graph: TaskGraph, extra_paths: tuple[str, ...] = ()) -> BuildResult:
        """Delete every declared output and forget all fingerprints.

        Runs as a task with no inputs, so it is never skipped.
        """
        node = TaskNode(id=CLEAN_TASK_ID, action=TaskAction(toolchain=CLEAN_TASK_ID))
        start = time.monotonic()
        root = self.project_root.resolve()

        removed: list[str] = []
        errors: list[str] = []
        for relative in [*graph.all_outputs(), *extra_paths]:
            path = (root / relative).resolve()
            if not path.is_relative_to(root) or path == root:
                logger.warning("Refusing to delete {} outside the project root", relative)
                errors.append(f"{relative}: outside project root")
                continue
            try:
                if path.is_dir() and not path.is_symlink():
                    await asyncio.to_thread(shutil.rmtree, path)
                elif path.exists() or path.is_symlink():
                    await asyncio.to_thread(path.unlink)
                else:
                    continue
            except OSError as e:
                errors.append(f"{relative}: {e}")
                continue
            removed.append(relative)
            logger.debug("Deleted {}", path)

        await self.fingerprints.invalidate_all()
        for task in graph:
            task.reset_fingerprint()

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info("Clean removed {} paths", len(removed))
        if errors:
            return BuildResult(
                task_id=node.id,
                status=BuildStatus.FAILED,
                outputs=removed,
                error="could not delete some outputs",
                diagnostics="\n".join(errors),
                duration_ms=duration_ms,
            )
        return BuildResult(
            task_id=node.id,
            status=BuildStatus.SUCCEEDED,
            outputs=removed,
            duration_ms=duration_ms,
        )
