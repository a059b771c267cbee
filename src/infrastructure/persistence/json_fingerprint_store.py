from __future__ import annotations

import asyncio
import json
from pathlib import Path

from loguru import logger

from src.domain.ports.fingerprint_store_port import FingerprintStorePort
from src.infrastructure.persistence.atomic_io import atomic_write, read_json
from src.infrastructure.persistence.locks import KeyedLock, async_file_lock

STORE_VERSION = 1


class JsonFingerprintStore(FingerprintStorePort):
    """Fingerprint store persisted as ``<state_dir>/fingerprints.json``.

    Recording one task's fingerprint is serialized per task id. The file is
    rewritten atomically under a file lock, and the snapshot is taken inside
    the lock so concurrent writers never drop each other's entries.
    """

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir
        self._entries: dict[str, str] | None = None
        self._load_lock = asyncio.Lock()
        self._keys = KeyedLock()

    @property
    def path(self) -> Path:
        return self.state_dir / "fingerprints.json"

    @property
    def _lock_path(self) -> Path:
        return self.state_dir / ".fingerprints.lock"

    async def _ensure_loaded(self) -> dict[str, str]:
        async with self._load_lock:
            if self._entries is None:
                try:
                    data = await read_json(self.path)
                except ValueError as e:
                    # Every task re-runs and the next record rewrites the file
                    logger.warning("Ignoring corrupt fingerprint store {}: {}", self.path, e)
                    data = None

                if data is None:
                    self._entries = {}
                elif not isinstance(data, dict) or not isinstance(
                    data.get("fingerprints", {}), dict
                ):
                    logger.warning("Ignoring malformed fingerprint store {}", self.path)
                    self._entries = {}
                elif data.get("version") != STORE_VERSION:
                    logger.warning(
                        "Ignoring fingerprint store {} with unknown version {}",
                        self.path,
                        data.get("version"),
                    )
                    self._entries = {}
                else:
                    self._entries = dict(data.get("fingerprints", {}))
                logger.debug("Loaded {} fingerprints from {}", len(self._entries), self.path)
            return self._entries

    async def get(self, task_id: str) -> str | None:
        entries = await self._ensure_loaded()
        async with self._keys.hold(task_id):
            return entries.get(task_id)

    async def record(self, task_id: str, fingerprint: str) -> None:
        entries = await self._ensure_loaded()
        async with self._keys.hold(task_id):
            entries[task_id] = fingerprint
            async with async_file_lock(self._lock_path):
                payload = {"version": STORE_VERSION, "fingerprints": dict(sorted(entries.items()))}
                await atomic_write(self.path, json.dumps(payload, indent=2))
        logger.debug("Recorded fingerprint for task {}", task_id)

    async def invalidate_all(self) -> None:
        async with self._load_lock:
            self._entries = {}
            async with async_file_lock(self._lock_path):
                if self.path.exists():
                    await asyncio.to_thread(self.path.unlink)
        logger.info("Fingerprint store invalidated: {}", self.path)
