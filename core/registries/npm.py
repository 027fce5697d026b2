"""npm registry client."""

from typing import Any
from urllib.parse import quote

from ..models import UNKNOWN_VERSION, RegistryMetadata
from .base import RegistryClient, text_or_none


class NpmRegistryClient(RegistryClient):
    """Client for the npm registry JSON API (registry.npmjs.org)."""

    registry_id = "npm"

    def package_url(self, package: str) -> str:
        # Scoped packages keep the @ but encode the slash: @types%2Fnode
        return f"{self.base_url}/{quote(package, safe='@')}"

    def normalize(self, data: dict[str, Any], package: str) -> RegistryMetadata:
        dist_tags = data.get("dist-tags") if isinstance(data.get("dist-tags"), dict) else {}
        latest = text_or_none(dist_tags.get("latest")) or UNKNOWN_VERSION

        times = data.get("time") if isinstance(data.get("time"), dict) else {}
        last_published = text_or_none(times.get(latest)) or text_or_none(times.get("modified"))

        repository = data.get("repository")
        if isinstance(repository, dict):
            repository = repository.get("url")

        deprecated = data.get("deprecated")

        maintainers = [
            m["name"] for m in data.get("maintainers") or [] if isinstance(m, dict) and text_or_none(m.get("name"))
        ]

        return RegistryMetadata(
            latest_version=latest,
            is_deprecated=bool(deprecated),
            deprecation_message=deprecated if isinstance(deprecated, str) else None,
            description=text_or_none(data.get("description")),
            homepage=text_or_none(data.get("homepage")),
            repository_url=text_or_none(repository),
            license=text_or_none(data.get("license")),
            last_published=last_published,
            maintainers=maintainers or None,
        )
