from pydantic import BaseModel, Field

from src.domain.entities.build_result import BuildResult
from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.value_objects.build_status import BuildStatus


class RunSummary(BaseModel):
    project: str
    results: list[BuildResult] = Field(default_factory=list)
    clean_result: BuildResult | None = None
    resolved: list[ResolvedArtifact] = Field(default_factory=list)
    duration_ms: int = 0

    def count(self, status: BuildStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def failed_results(self) -> list[BuildResult]:
        return [r for r in self.results if r.failed]

    @property
    def succeeded(self) -> bool:
        if self.clean_result is not None and self.clean_result.failed:
            return False
        return not self.failed_results

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
