import json
from typing import Any

from pydantic import BaseModel, Field


class TaskAction(BaseModel, frozen=True):
    """What a task does: which toolchain runs it and with which parameters."""

    toolchain: str
    params: dict[str, Any] = Field(default_factory=dict)
    env: dict[str, str] = Field(default_factory=dict)
    timeout_s: int = 1800

    def identity(self) -> str:
        """Stable textual identity, part of the task fingerprint."""
        data = self.model_dump(mode="json", exclude={"timeout_s"})
        return json.dumps(data, sort_keys=True, separators=(",", ":"))
