"""PyPI registry client."""

import re
from typing import Any
from urllib.parse import quote

from ..models import UNKNOWN_VERSION, RegistryMetadata
from .base import RegistryClient, text_or_none


def canonicalize_name(name: str) -> str:
    """Normalize a distribution name per PEP 503."""
    return re.sub(r"[-_.]+", "-", name).lower()


class PyPIRegistryClient(RegistryClient):
    """Client for the PyPI JSON API (pypi.org/pypi/<name>/json)."""

    registry_id = "pypi"

    def package_url(self, package: str) -> str:
        return f"{self.base_url}/{quote(canonicalize_name(package), safe='')}/json"

    def normalize(self, data: dict[str, Any], package: str) -> RegistryMetadata:
        info = data.get("info") if isinstance(data.get("info"), dict) else {}
        latest = text_or_none(info.get("version")) or UNKNOWN_VERSION

        project_urls = info.get("project_urls") if isinstance(info.get("project_urls"), dict) else {}
        repository = next(
            (
                text_or_none(project_urls.get(key))
                for key in ("Repository", "Source", "Source Code", "Code")
                if text_or_none(project_urls.get(key))
            ),
            None,
        )

        maintainer = text_or_none(info.get("maintainer")) or text_or_none(info.get("author"))

        return RegistryMetadata(
            latest_version=latest,
            is_deprecated=False,
            description=text_or_none(info.get("summary")),
            homepage=text_or_none(info.get("home_page")) or text_or_none(project_urls.get("Homepage")),
            repository_url=repository,
            license=text_or_none(info.get("license")),
            last_published=self._upload_time(data, latest),
            maintainers=[maintainer] if maintainer else None,
        )

    @staticmethod
    def _upload_time(data: dict[str, Any], version: str) -> str | None:
        releases = data.get("releases") if isinstance(data.get("releases"), dict) else {}
        files = releases.get(version)
        if not isinstance(files, list):
            # Newer payloads carry the files of info.version in "urls"
            files = data.get("urls") if isinstance(data.get("urls"), list) else []
        for file_info in files:
            if isinstance(file_info, dict):
                uploaded = text_or_none(file_info.get("upload_time_iso_8601")) or text_or_none(
                    file_info.get("upload_time")
                )
                if uploaded:
                    return uploaded
        return None
