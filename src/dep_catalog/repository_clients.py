"""
Maven repository client for checking that registry coordinates are published.

Implements a rate-limited async client that probes each configured
repository for the coordinate's POM file.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from .cli_config import get_config
from .coordinate import Coordinate
from .error_handling import log_network_error
from .registry import DependencyRegistry
from .structured_logging import log_repository_check


@dataclass(frozen=True)
class CoordinateCheckResult:
    """Result of looking up one coordinate in the configured repositories."""

    name: str
    coordinate: str
    exists: bool
    repository: Optional[str] = None
    error: Optional[str] = None
    check_duration_ms: Optional[int] = None


class RateLimiter:
    """Simple rate limiter to prevent overwhelming repositories."""

    def __init__(self, requests_per_second: float = 10.0):
        self.requests_per_second = requests_per_second
        self.min_interval = 1.0 / requests_per_second
        self.last_request_time = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limits."""
        async with self._lock:
            time_since_last = time.time() - self.last_request_time
            if time_since_last < self.min_interval:
                await asyncio.sleep(self.min_interval - time_since_last)
            self.last_request_time = time.time()


def pom_url(base_url: str, coordinate: Coordinate) -> str:
    """Location of a coordinate's POM in a Maven2-layout repository."""
    group_path = coordinate.group.replace(".", "/")
    return (
        f"{base_url.rstrip('/')}/{group_path}/{coordinate.artifact}/"
        f"{coordinate.version}/{coordinate.artifact}-{coordinate.version}.pom"
    )


class MavenRepositoryClient:
    """
    Client for Maven2-layout repositories.

    Uses the async context manager pattern for httpx.AsyncClient resource
    management. The HTTP client is created on context entry and closed on exit.
    """

    def __init__(
        self,
        repository_urls: Optional[Dict[str, str]] = None,
        rate_limit_rps: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = get_config()
        self.repository_urls = dict(repository_urls or config.network.repository_urls)
        self.rate_limiter = RateLimiter(rate_limit_rps or config.network.rate_limit)
        self.timeout = timeout or config.network.timeout_seconds
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

        self._headers = {
            "User-Agent": config.network.user_agent,
            "Accept": "application/xml",
        }

    async def __aenter__(self):
        """Initialize the HTTP client when entering the context."""
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            transport=self.transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up the HTTP client when exiting the context."""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def check_coordinate(self, name: str, coordinate: Coordinate) -> CoordinateCheckResult:
        """Check each repository in order until the coordinate's POM is found."""
        start_time = time.time()

        if self.client is None:
            return CoordinateCheckResult(
                name=name,
                coordinate=str(coordinate),
                exists=False,
                error="HTTP client not initialized",
            )

        errors: List[str] = []
        for repository, base_url in self.repository_urls.items():
            url = pom_url(base_url, coordinate)
            try:
                await self.rate_limiter.acquire()
                response = await self.client.head(url)
            except httpx.RequestError as e:
                log_network_error(
                    f"Repository request failed: {e}",
                    "repository_clients",
                    "check_coordinate",
                    url=url,
                    exception=e,
                )
                errors.append(f"{repository}: {type(e).__name__}")
                continue

            if response.status_code == 200:
                duration_ms = int((time.time() - start_time) * 1000)
                log_repository_check(str(coordinate), repository, True, duration_ms)
                return CoordinateCheckResult(
                    name=name,
                    coordinate=str(coordinate),
                    exists=True,
                    repository=repository,
                    check_duration_ms=duration_ms,
                )
            if response.status_code != 404:
                log_network_error(
                    "Unexpected repository response",
                    "repository_clients",
                    "check_coordinate",
                    url=url,
                    status_code=response.status_code,
                )
                errors.append(f"{repository}: HTTP {response.status_code}")

        duration_ms = int((time.time() - start_time) * 1000)
        # Missing requires at least one repository to have answered 404
        if len(errors) == len(self.repository_urls):
            return CoordinateCheckResult(
                name=name,
                coordinate=str(coordinate),
                exists=False,
                error="; ".join(errors),
                check_duration_ms=duration_ms,
            )

        log_repository_check(str(coordinate), None, False, duration_ms)
        return CoordinateCheckResult(
            name=name,
            coordinate=str(coordinate),
            exists=False,
            check_duration_ms=duration_ms,
        )


async def verify_registry(
    registry: DependencyRegistry,
    client: Optional[MavenRepositoryClient] = None,
    max_concurrent: int = 4,
) -> List[CoordinateCheckResult]:
    """Check every registry coordinate, returning results in registry order."""
    client = client or MavenRepositoryClient()
    semaphore = asyncio.Semaphore(max_concurrent)

    async def check(name: str) -> CoordinateCheckResult:
        async with semaphore:
            return await client.check_coordinate(name, registry.coordinate(name))

    async with client:
        return list(await asyncio.gather(*(check(name) for name in registry)))
