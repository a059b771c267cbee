from pydantic import BaseModel, Field

from src.domain.value_objects.build_status import BuildStatus, is_success


class BuildResult(BaseModel):
    task_id: str
    status: BuildStatus
    outputs: list[str] = Field(default_factory=list)
    error: str | None = None
    diagnostics: str | None = None
    duration_ms: int = 0

    @property
    def failed(self) -> bool:
        return not is_success(self.status)
