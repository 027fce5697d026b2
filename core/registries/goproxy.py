"""Go module proxy client."""

from typing import Any

from ..models import UNKNOWN_VERSION, RegistryMetadata
from .base import RegistryClient, text_or_none


def encode_module_path(module: str) -> str:
    """Encode a module path for the proxy protocol.

    Uppercase letters become ``!`` followed by the lowercase letter:
    github.com/Azure/go-autorest -> github.com/!azure/go-autorest
    """
    return "".join(f"!{char.lower()}" if char.isupper() else char for char in module)


class GoProxyClient(RegistryClient):
    """Client for proxy.golang.org ``/@latest`` documents."""

    registry_id = "goproxy"

    def package_url(self, package: str) -> str:
        return f"{self.base_url}/{encode_module_path(package)}/@latest"

    def normalize(self, data: dict[str, Any], package: str) -> RegistryMetadata:
        return RegistryMetadata(
            latest_version=text_or_none(data.get("Version")) or UNKNOWN_VERSION,
            is_deprecated=False,
            last_published=text_or_none(data.get("Time")),
            homepage=f"https://pkg.go.dev/{package}",
        )
