from abc import ABC, abstractmethod


class FingerprintStorePort(ABC):
    """Port for persisted task fingerprints (task id -> hash)."""

    @abstractmethod
    async def get(self, task_id: str) -> str | None:
        """Return the last recorded fingerprint for a task."""

    @abstractmethod
    async def record(self, task_id: str, fingerprint: str) -> None:
        """Record a fingerprint after a successful execution."""

    @abstractmethod
    async def invalidate_all(self) -> None:
        """Forget every recorded fingerprint."""
