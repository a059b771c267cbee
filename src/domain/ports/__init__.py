from src.domain.ports.artifact_cache_port import ArtifactCachePort
from src.domain.ports.fingerprint_store_port import FingerprintStorePort
from src.domain.ports.lockfile_port import LockedArtifact, LockfilePort
from src.domain.ports.repository_port import RepositoryPort, RepositoryUnavailable
from src.domain.ports.toolchain_port import ToolchainPort

__all__ = [
    # Artifact cache port
    "ArtifactCachePort",
    # Fingerprint store port
    "FingerprintStorePort",
    # Lockfile port
    "LockedArtifact",
    "LockfilePort",
    # Repository port
    "RepositoryPort",
    "RepositoryUnavailable",
    # Toolchain port
    "ToolchainPort",
]
