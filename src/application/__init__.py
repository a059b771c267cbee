from src.application.build_pipeline import BuildPipeline
from src.application.orchestrator import Orchestrator

__all__ = ["BuildPipeline", "Orchestrator"]
