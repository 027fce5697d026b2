"""Best-effort client for registries without a dedicated client."""

from typing import Any
from urllib.parse import quote

from ..models import UNKNOWN_VERSION, RegistryMetadata
from .base import RegistryClient, text_or_none


class GenericJSONClient(RegistryClient):
    """GETs ``<base_url>/<package>`` and looks for common version keys."""

    registry_id = "generic"

    def package_url(self, package: str) -> str:
        return f"{self.base_url}/{quote(package, safe='@')}"

    def normalize(self, data: dict[str, Any], package: str) -> RegistryMetadata:
        latest = text_or_none(data.get("version")) or text_or_none(data.get("latest")) or UNKNOWN_VERSION
        return RegistryMetadata(
            latest_version=latest,
            is_deprecated=False,
            description=text_or_none(data.get("description")) or text_or_none(data.get("summary")),
        )
