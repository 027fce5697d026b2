"""crates.io registry client."""

from typing import Any
from urllib.parse import quote

from ..models import UNKNOWN_VERSION, RegistryMetadata
from .base import RegistryClient, text_or_none


class CratesRegistryClient(RegistryClient):
    """Client for the crates.io crate API.

    crates.io rejects requests without a User-Agent, and it lists versions
    newest first. Yanked releases are never reported as latest. There is no
    deprecation flag, so crates are never marked deprecated.
    """

    registry_id = "crates"

    def package_url(self, package: str) -> str:
        return f"{self.base_url}/{quote(package, safe='')}"

    def headers(self) -> dict[str, str]:
        headers = super().headers()
        headers.setdefault("User-Agent", "depscout (dependency checker)")
        return headers

    def normalize(self, data: dict[str, Any], package: str) -> RegistryMetadata:
        crate = data.get("crate") if isinstance(data.get("crate"), dict) else {}
        versions = data.get("versions") if isinstance(data.get("versions"), list) else []

        latest_entry = next(
            (v for v in versions if isinstance(v, dict) and not v.get("yanked") and text_or_none(v.get("num"))),
            None,
        )
        latest = latest_entry["num"] if latest_entry else UNKNOWN_VERSION

        downloads = crate.get("downloads")
        return RegistryMetadata(
            latest_version=latest,
            is_deprecated=False,
            description=text_or_none(crate.get("description")),
            homepage=text_or_none(crate.get("homepage")),
            repository_url=text_or_none(crate.get("repository")),
            license=text_or_none(latest_entry.get("license")) if latest_entry else None,
            last_published=(text_or_none(latest_entry.get("created_at")) if latest_entry else None)
            or text_or_none(crate.get("updated_at")),
            download_count=downloads if isinstance(downloads, int) else None,
        )
