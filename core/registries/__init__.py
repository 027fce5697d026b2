"""Registry clients, one per package registry.

Usage:
    from core.registries import get_client

    client = get_client("npm", settings)
    async with httpx.AsyncClient() as http:
        metadata = await client.fetch_latest(http, "left-pad")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import RegistryClient
from .crates import CratesRegistryClient
from .generic import GenericJSONClient
from .goproxy import GoProxyClient
from .npm import NpmRegistryClient
from .pypi import PyPIRegistryClient
from .rubygems import RubyGemsClient

if TYPE_CHECKING:
    from ..config import Settings

# registry id -> (client class, Settings attribute holding the base URL)
_REGISTRY: dict[str, tuple[type[RegistryClient], str]] = {
    "npm": (NpmRegistryClient, "npm_registry_url"),
    "crates": (CratesRegistryClient, "crates_registry_url"),
    "pypi": (PyPIRegistryClient, "pypi_registry_url"),
    "goproxy": (GoProxyClient, "go_proxy_url"),
    "rubygems": (RubyGemsClient, "rubygems_registry_url"),
}


def get_client(registry_id: str, settings: Settings) -> RegistryClient:
    """Build the client for ``registry_id``.

    Unknown ids get a :class:`GenericJSONClient` pointed at the npm base URL.
    """
    cls, url_attr = _REGISTRY.get(registry_id.lower(), (GenericJSONClient, "npm_registry_url"))
    return cls(
        getattr(settings, url_attr),
        timeout=settings.registry_timeout,
        user_agent=settings.user_agent,
    )


__all__ = [
    "CratesRegistryClient",
    "GenericJSONClient",
    "GoProxyClient",
    "NpmRegistryClient",
    "PyPIRegistryClient",
    "RegistryClient",
    "RubyGemsClient",
    "get_client",
]
