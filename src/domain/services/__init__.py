from src.domain.services.fingerprint import compute_fingerprint, file_sha256
from src.domain.services.task_graph import TaskGraph

__all__ = [
    "TaskGraph",
    "compute_fingerprint",
    "file_sha256",
]
