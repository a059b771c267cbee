import time
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

from src.application.dto.build_config import BuildConfig
from src.application.dto.run_summary import RunSummary
from src.application.orchestrator import Orchestrator, ResultCallback, StartCallback
from src.application.use_cases.build_task_graph import BuildTaskGraph
from src.application.use_cases.resolve_dependencies import DependencyResolver
from src.domain.entities.build_result import BuildResult
from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.ports.fingerprint_store_port import FingerprintStorePort
from src.domain.ports.toolchain_port import ToolchainPort
from src.domain.services.task_graph import TaskGraph


class BuildPipeline:
    """Coordinates one build run.

    Pipeline:
    Resolve dependencies -> Build task graph -> [Clean] -> Run orchestrator

    Resolution and graph errors are raised before any task executes.
    """

    def __init__(
        self,
        config: BuildConfig,
        project_root: Path,
        resolver: DependencyResolver,
        toolchains: Mapping[str, ToolchainPort],
        fingerprints: FingerprintStorePort,
    ) -> None:
        self.config = config
        self.project_root = project_root
        self.resolver = resolver
        self.toolchains = toolchains
        self.fingerprints = fingerprints
        self.build_graph = BuildTaskGraph(toolchains)

    async def resolve(self) -> list[ResolvedArtifact]:
        resolved = await self.resolver.resolve(self.config.dependencies)
        return list(resolved.values())

    def graph(self) -> TaskGraph:
        return self.build_graph.execute(self.config)

    def _orchestrator(
        self,
        artifacts: list[ResolvedArtifact],
        fail_fast: bool | None,
        jobs: int | None,
        on_start: StartCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> Orchestrator:
        settings = self.config.settings
        return Orchestrator(
            toolchains=self.toolchains,
            fingerprints=self.fingerprints,
            project_root=self.project_root,
            artifacts={a.key: a for a in artifacts},
            jobs=jobs or settings.jobs,
            fail_fast=settings.fail_fast if fail_fast is None else fail_fast,
            on_start=on_start,
            on_result=on_result,
        )

    async def clean(self) -> BuildResult:
        graph = self.graph()
        orchestrator = self._orchestrator([], fail_fast=None, jobs=None)
        return await orchestrator.clean(graph, self.config.settings.clean_paths)

    async def build(
        self,
        clean: bool = False,
        fail_fast: bool | None = None,
        jobs: int | None = None,
        on_start: StartCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> RunSummary:
        start = time.monotonic()

        artifacts = await self.resolve()
        graph = self.graph()
        orchestrator = self._orchestrator(artifacts, fail_fast, jobs, on_start, on_result)

        summary = RunSummary(project=self.config.project, resolved=artifacts)
        if clean:
            summary.clean_result = await orchestrator.clean(
                graph, self.config.settings.clean_paths
            )
            if summary.clean_result.failed:
                logger.error("Clean failed, not building")
                summary.duration_ms = int((time.monotonic() - start) * 1000)
                return summary

        summary.results = await orchestrator.run(graph)
        summary.duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Build of {} finished: {} tasks, {} failed",
            self.config.project,
            len(summary.results),
            len(summary.failed_results),
        )
        return summary
