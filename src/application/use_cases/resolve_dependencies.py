import asyncio
from collections.abc import Iterable

from loguru import logger

from src.domain.entities.resolved_artifact import ResolvedArtifact
from src.domain.errors import ChecksumMismatch, UnresolvedDependency
from src.domain.ports.artifact_cache_port import ArtifactCachePort
from src.domain.ports.lockfile_port import LockedArtifact, LockfilePort
from src.domain.ports.repository_port import RepositoryPort, RepositoryUnavailable
from src.domain.value_objects.coordinate import ArtifactCoordinate
from src.infrastructure.persistence.locks import KeyedLock


class DependencyResolver:
    """Resolve coordinates against an ordered repository list.

    Repositories are queried in priority order and the first one that has the
    artifact wins. Resolutions are cached by ``name:version`` for the lifetime
    of the resolver, so resolving again in the same run returns the same
    artifacts even if a repository has since become unreachable.

    When a lockfile entry exists, a matching artifact already in the cache is
    reused without querying repositories, and a fetched artifact whose hash
    differs from the locked one is rejected.
    """

    def __init__(
        self,
        repositories: list[RepositoryPort],
        cache: ArtifactCachePort,
        lockfile: LockfilePort | None = None,
    ) -> None:
        self.repositories = repositories
        self.cache = cache
        self.lockfile = lockfile
        self._resolved: dict[str, ResolvedArtifact] = {}
        self._keys = KeyedLock()
        self._locked: dict[str, LockedArtifact] | None = None
        self._locked_guard = asyncio.Lock()

    async def resolve(
        self, coordinates: Iterable[ArtifactCoordinate]
    ) -> dict[ArtifactCoordinate, ResolvedArtifact]:
        """Resolve every coordinate or raise the first failure in declared order.

        Raises:
            UnresolvedDependency: no repository provides a coordinate.
            ChecksumMismatch: a fetched artifact differs from its locked hash.
        """
        unique = list(dict.fromkeys(coordinates))
        outcomes = await asyncio.gather(
            *(self.resolve_one(c) for c in unique),
            return_exceptions=True,
        )

        resolved: dict[ArtifactCoordinate, ResolvedArtifact] = {}
        for coordinate, outcome in zip(unique, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                raise outcome
            resolved[coordinate] = outcome

        if self.lockfile is not None and resolved:
            await self.lockfile.save(
                {
                    artifact.key: LockedArtifact(
                        repository=artifact.repository, sha256=artifact.sha256
                    )
                    for artifact in resolved.values()
                }
            )
        return resolved

    async def resolve_one(self, coordinate: ArtifactCoordinate) -> ResolvedArtifact:
        key = coordinate.key
        async with self._keys.hold(key):
            cached = self._resolved.get(key)
            if cached is not None:
                logger.debug("Resolved {} from run cache", key)
                return cached

            locked = (await self._locked_entries()).get(key)
            if locked is not None:
                hit = await self.cache.lookup(coordinate, locked.sha256, locked.repository)
                if hit is not None:
                    logger.debug("Resolved {} from artifact cache (locked)", key)
                    self._resolved[key] = hit
                    return hit

            artifact = await self._fetch(coordinate)
            if locked is not None and locked.sha256 != artifact.sha256:
                raise ChecksumMismatch(key, locked.sha256, artifact.sha256, artifact.repository)

            self._resolved[key] = artifact
            logger.info(
                "Resolved {} from '{}' ({})", key, artifact.repository, artifact.sha256[:12]
            )
            return artifact

    def repository_order(self, coordinate: ArtifactCoordinate) -> list[RepositoryPort]:
        if not coordinate.repositories:
            return list(self.repositories)
        by_name = {r.name: r for r in self.repositories}
        return [by_name[name] for name in coordinate.repositories if name in by_name]

    async def _fetch(self, coordinate: ArtifactCoordinate) -> ResolvedArtifact:
        attempted: list[str] = []
        reasons: list[str] = []

        for repository in self.repository_order(coordinate):
            attempted.append(repository.name)
            try:
                content = await repository.fetch(coordinate)
            except RepositoryUnavailable as e:
                logger.warning(
                    "Repository '{}' unavailable for {}: {}", repository.name, coordinate.key, e
                )
                reasons.append(f"{repository.name}: {e}")
                continue
            if content is None:
                continue
            return await self.cache.store(coordinate, content, repository.name)

        raise UnresolvedDependency(coordinate.key, attempted, reasons)

    async def _locked_entries(self) -> dict[str, LockedArtifact]:
        async with self._locked_guard:
            if self._locked is None:
                self._locked = await self.lockfile.load() if self.lockfile else {}
            return self._locked
