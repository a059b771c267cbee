from src.application.dto.build_config import BuildConfig, BuildSettings, TaskDeclaration
from src.application.dto.run_summary import RunSummary

__all__ = [
    "BuildConfig",
    "BuildSettings",
    "RunSummary",
    "TaskDeclaration",
]
