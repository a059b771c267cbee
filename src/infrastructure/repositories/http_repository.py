from typing import Any

import httpx
from loguru import logger
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.domain.ports.repository_port import RepositoryPort, RepositoryUnavailable
from src.domain.value_objects.coordinate import ArtifactCoordinate


class _TransientStatus(Exception):
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


def _log_retry(retry_state: Any) -> None:
    exc = retry_state.outcome.exception()
    logger.warning("[HTTP] Retry {}: {}", retry_state.attempt_number, str(exc)[:100])


class HttpRepository(RepositoryPort):
    """Maven layout served over HTTP(S).

    404 means the artifact is not in this repository. Transport errors and
    5xx responses are retried; if they persist the repository is reported
    unavailable.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        timeout_s: float = 30.0,
        attempts: int = 3,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.attempts = attempts
        self._client = client

    def url_for(self, coordinate: ArtifactCoordinate) -> str:
        return f"{self.base_url}/{coordinate.layout_path()}"

    async def fetch(self, coordinate: ArtifactCoordinate) -> bytes | None:
        url = self.url_for(coordinate)
        try:
            return await self._get_with_retry(url)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise RepositoryUnavailable(f"{url}: {cause}") from cause
        except httpx.HTTPError as e:
            raise RepositoryUnavailable(f"{url}: {e}") from e

    async def _get_with_retry(self, url: str) -> bytes | None:
        fetch = retry(
            retry=retry_if_exception_type((httpx.TransportError, _TransientStatus)),
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=0.5, max=10),
            before_sleep=_log_retry,
        )(self._get)
        return await fetch(url)

    async def _get(self, url: str) -> bytes | None:
        if self._client is not None:
            response = await self._client.get(url, timeout=self.timeout_s)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(url, timeout=self.timeout_s)

        if response.status_code == 404:
            logger.debug("[{}] not found: {}", self.name, url)
            return None
        if response.status_code >= 500:
            raise _TransientStatus(response.status_code)
        response.raise_for_status()
        logger.debug("[{}] fetched {} ({} bytes)", self.name, url, len(response.content))
        return response.content
