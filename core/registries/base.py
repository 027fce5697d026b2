"""Abstract base class for registry clients.

A client knows one registry's URL layout and payload shape. The HTTP client
itself is owned by the caller and shared by all lookups of an analysis run.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..errors import RegistryUnavailable
from ..log import logger
from ..models import UNKNOWN_VERSION, RegistryMetadata


def text_or_none(value: Any) -> str | None:
    """Return ``value`` if it is a non-empty string."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class RegistryClient(ABC):
    """Fetches and normalizes package metadata from one registry.

    Implementations must provide:
    - registry_id: Identifier used by ecosystem descriptors
    - package_url(): URL of the package document
    - normalize(): Map the JSON document to :class:`RegistryMetadata`
    """

    registry_id: str = ""

    def __init__(self, base_url: str, timeout: float = 10.0, user_agent: str | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent

    @abstractmethod
    def package_url(self, package: str) -> str:
        """Return the URL of the package document."""
        ...

    @abstractmethod
    def normalize(self, data: dict[str, Any], package: str) -> RegistryMetadata:
        """Convert a registry payload into :class:`RegistryMetadata`."""
        ...

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    async def fetch_latest(self, client: httpx.AsyncClient, package: str) -> RegistryMetadata:
        """Fetch metadata for ``package``.

        Args:
            client: Shared httpx.AsyncClient
            package: Package name as declared in the manifest

        Returns:
            Normalized metadata with a concrete latest version

        Raises:
            RegistryUnavailable: On transport errors, timeouts, non-2xx
                responses, invalid URLs, undecodable or malformed bodies
                or a missing latest version.
        """
        url = self.package_url(package)
        logger.debug("GET {}", url)

        try:
            response = await asyncio.wait_for(
                client.get(url, headers=self.headers(), timeout=self.timeout),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RegistryUnavailable(self.registry_id, package, "timeout") from exc
        except httpx.HTTPError as exc:
            raise RegistryUnavailable(self.registry_id, package, f"network error: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise RegistryUnavailable(self.registry_id, package, f"invalid URL: {exc}") from exc

        if not response.is_success:
            raise RegistryUnavailable(self.registry_id, package, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise RegistryUnavailable(self.registry_id, package, "invalid JSON body") from exc

        if not isinstance(data, dict):
            raise RegistryUnavailable(self.registry_id, package, "unexpected payload shape")

        try:
            metadata = self.normalize(data, package)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise RegistryUnavailable(self.registry_id, package, f"unexpected payload shape: {exc}") from exc
        if not metadata.latest_version or metadata.latest_version == UNKNOWN_VERSION:
            raise RegistryUnavailable(self.registry_id, package, "no latest version in response")
        return metadata

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<{self.__class__.__name__} base_url={self.base_url!r}>"
