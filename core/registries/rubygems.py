"""RubyGems registry client."""

from typing import Any
from urllib.parse import quote

from ..models import UNKNOWN_VERSION, RegistryMetadata
from .base import RegistryClient, text_or_none


class RubyGemsClient(RegistryClient):
    """Client for rubygems.org ``/api/v1/gems/<name>.json``."""

    registry_id = "rubygems"

    def package_url(self, package: str) -> str:
        return f"{self.base_url}/{quote(package, safe='')}.json"

    def normalize(self, data: dict[str, Any], package: str) -> RegistryMetadata:
        licenses = data.get("licenses")
        downloads = data.get("downloads")
        authors = text_or_none(data.get("authors"))
        return RegistryMetadata(
            latest_version=text_or_none(data.get("version")) or UNKNOWN_VERSION,
            is_deprecated=False,
            description=text_or_none(data.get("info")),
            homepage=text_or_none(data.get("homepage_uri")),
            repository_url=text_or_none(data.get("source_code_uri")),
            license=", ".join(licenses) if isinstance(licenses, list) and licenses else None,
            last_published=text_or_none(data.get("version_created_at")),
            maintainers=[a.strip() for a in authors.split(",")] if authors else None,
            download_count=downloads if isinstance(downloads, int) else None,
        )
