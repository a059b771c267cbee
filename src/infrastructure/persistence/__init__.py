from src.infrastructure.persistence.json_fingerprint_store import JsonFingerprintStore
from src.infrastructure.persistence.json_lockfile_store import JsonLockfileStore

__all__ = ["JsonFingerprintStore", "JsonLockfileStore"]
