"""Locks shared by the artifact cache and the fingerprint store."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from filelock import FileLock


class KeyedLock:
    """One asyncio.Lock per key.

    Work on one key (a coordinate, a task id) is serialized while work on
    different keys proceeds concurrently.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        async with self._lock_for(key):
            yield


@asynccontextmanager
async def async_file_lock(lock_path: Path) -> AsyncIterator[None]:
    """Cross-process file lock acquired off the event loop.

    Usage:
        async with async_file_lock(state_dir / ".fingerprints.lock"):
            await write_state()
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(lock_path)

    await asyncio.to_thread(lock.acquire)
    try:
        yield
    finally:
        await asyncio.to_thread(lock.release)
