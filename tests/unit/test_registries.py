"""Tests for registry clients."""

from unittest.mock import AsyncMock

import httpx
import pytest

from core.errors import RegistryUnavailable
from core.registries import (
    CratesRegistryClient,
    GenericJSONClient,
    GoProxyClient,
    NpmRegistryClient,
    PyPIRegistryClient,
    RubyGemsClient,
    get_client,
)
from core.registries.goproxy import encode_module_path


async def fetch(client, transport, package):
    async with httpx.AsyncClient(transport=transport) as http:
        return await client.fetch_latest(http, package)


class TestNpmRegistryClient:
    """Test npm normalization and failure handling."""

    @pytest.mark.asyncio
    async def test_latest_from_dist_tags(self, registry_transport):
        transport = registry_transport(
            {
                "/left-pad": {
                    "dist-tags": {"latest": "1.3.0"},
                    "time": {"1.3.0": "2018-04-09T01:42:13.000Z", "modified": "2022-06-19T00:00:00.000Z"},
                    "description": "String left pad",
                    "repository": {"type": "git", "url": "git+https://github.com/stevemao/left-pad.git"},
                    "license": "WTFPL",
                    "maintainers": [{"name": "stevemao"}, {"email": "no-name@example.org"}],
                }
            }
        )

        metadata = await fetch(NpmRegistryClient("https://registry.npmjs.org"), transport, "left-pad")

        assert metadata.latest_version == "1.3.0"
        assert metadata.last_published == "2018-04-09T01:42:13.000Z"
        assert metadata.repository_url == "git+https://github.com/stevemao/left-pad.git"
        assert metadata.maintainers == ["stevemao"]
        assert metadata.is_deprecated is False
        assert metadata.deprecation_message is None

    @pytest.mark.asyncio
    async def test_top_level_deprecated_field(self, registry_transport):
        transport = registry_transport(
            {"/left-pad": {"dist-tags": {"latest": "2.0.0"}, "deprecated": "use String.prototype.padStart"}}
        )

        metadata = await fetch(NpmRegistryClient("https://registry.npmjs.org"), transport, "left-pad")

        assert metadata.is_deprecated is True
        assert metadata.deprecation_message == "use String.prototype.padStart"

    def test_scoped_package_url(self):
        client = NpmRegistryClient("https://registry.npmjs.org/")

        assert client.package_url("@types/node") == "https://registry.npmjs.org/@types%2Fnode"

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self, registry_transport):
        with pytest.raises(RegistryUnavailable, match="HTTP 404"):
            await fetch(NpmRegistryClient("https://registry.npmjs.org"), registry_transport({}), "missing")

    @pytest.mark.asyncio
    async def test_network_error_raises(self, registry_transport):
        transport = registry_transport({"/left-pad": httpx.ConnectError("connection refused")})

        with pytest.raises(RegistryUnavailable, match="network error"):
            await fetch(NpmRegistryClient("https://registry.npmjs.org"), transport, "left-pad")

    @pytest.mark.asyncio
    async def test_timeout_raises(self, registry_transport):
        transport = registry_transport({"/left-pad": httpx.ReadTimeout("too slow")})

        with pytest.raises(RegistryUnavailable, match="timeout"):
            await fetch(NpmRegistryClient("https://registry.npmjs.org"), transport, "left-pad")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(RegistryUnavailable, match="invalid JSON"):
            await fetch(NpmRegistryClient("https://registry.npmjs.org"), transport, "left-pad")

    @pytest.mark.asyncio
    async def test_missing_latest_raises(self, registry_transport):
        transport = registry_transport({"/left-pad": {"name": "left-pad"}})

        with pytest.raises(RegistryUnavailable, match="no latest version"):
            await fetch(NpmRegistryClient("https://registry.npmjs.org"), transport, "left-pad")

    @pytest.mark.asyncio
    async def test_invalid_url_raises(self):
        """URL construction errors are registry failures, not crashes."""
        http = AsyncMock(spec=httpx.AsyncClient)
        http.get.side_effect = httpx.InvalidURL("Invalid non-printable ASCII character in URL")

        with pytest.raises(RegistryUnavailable, match="invalid URL"):
            await NpmRegistryClient("https://registry.npmjs.org").fetch_latest(http, "bad\x7fname")

    @pytest.mark.asyncio
    async def test_malformed_payload_raises(self, registry_transport):
        transport = registry_transport({"/left-pad": {"dist-tags": {"latest": "1.3.0"}, "maintainers": 5}})

        with pytest.raises(RegistryUnavailable, match="unexpected payload shape"):
            await fetch(NpmRegistryClient("https://registry.npmjs.org"), transport, "left-pad")


class TestCratesRegistryClient:
    """Test crates.io normalization."""

    @pytest.mark.asyncio
    async def test_yanked_versions_skipped(self, registry_transport):
        transport = registry_transport(
            {
                "/api/v1/crates/serde": {
                    "crate": {
                        "description": "A serialization framework",
                        "repository": "https://github.com/serde-rs/serde",
                        "downloads": 1000,
                        "updated_at": "2024-03-01T00:00:00Z",
                    },
                    "versions": [
                        {"num": "1.0.200", "yanked": True, "license": "MIT"},
                        {"num": "1.0.199", "yanked": False, "license": "MIT OR Apache-2.0"},
                        {"num": "1.0.198", "yanked": False},
                    ],
                }
            }
        )

        metadata = await fetch(CratesRegistryClient("https://crates.io/api/v1/crates"), transport, "serde")

        assert metadata.latest_version == "1.0.199"
        assert metadata.license == "MIT OR Apache-2.0"
        assert metadata.download_count == 1000
        assert metadata.is_deprecated is False

    @pytest.mark.asyncio
    async def test_user_agent_always_sent(self):
        captured = {}

        def handler(request):
            captured["ua"] = request.headers.get("user-agent")
            return httpx.Response(200, json={"versions": [{"num": "0.8.5"}]})

        client = CratesRegistryClient("https://crates.io/api/v1/crates")
        metadata = await fetch(client, httpx.MockTransport(handler), "rand")

        assert metadata.latest_version == "0.8.5"
        assert captured["ua"].startswith("depscout")

    @pytest.mark.asyncio
    async def test_all_yanked_is_a_failure(self, registry_transport):
        transport = registry_transport({"/api/v1/crates/gone": {"versions": [{"num": "0.1.0", "yanked": True}]}})

        with pytest.raises(RegistryUnavailable):
            await fetch(CratesRegistryClient("https://crates.io/api/v1/crates"), transport, "gone")


class TestOtherRegistryClients:
    """Test PyPI, Go proxy, RubyGems and generic normalization."""

    @pytest.mark.asyncio
    async def test_pypi(self, registry_transport):
        transport = registry_transport(
            {
                "/pypi/fastapi/json": {
                    "info": {
                        "version": "0.115.0",
                        "summary": "FastAPI framework",
                        "license": "MIT",
                        "author": "Sebastián Ramírez",
                        "project_urls": {"Repository": "https://github.com/fastapi/fastapi"},
                    },
                    "releases": {"0.115.0": [{"upload_time_iso_8601": "2024-09-17T19:18:10.123Z"}]},
                }
            }
        )

        metadata = await fetch(PyPIRegistryClient("https://pypi.org/pypi"), transport, "FastAPI")

        assert metadata.latest_version == "0.115.0"
        assert metadata.description == "FastAPI framework"
        assert metadata.repository_url == "https://github.com/fastapi/fastapi"
        assert metadata.last_published == "2024-09-17T19:18:10.123Z"
        assert metadata.maintainers == ["Sebastián Ramírez"]

    @pytest.mark.asyncio
    async def test_go_proxy(self, registry_transport):
        transport = registry_transport(
            {"/github.com/!azure/go-autorest/@latest": {"Version": "v14.2.0+incompatible", "Time": "2020-06-01T00:00:00Z"}}
        )

        metadata = await fetch(GoProxyClient("https://proxy.golang.org"), transport, "github.com/Azure/go-autorest")

        assert metadata.latest_version == "v14.2.0+incompatible"
        assert metadata.last_published == "2020-06-01T00:00:00Z"

    def test_module_path_encoding(self):
        assert encode_module_path("github.com/BurntSushi/toml") == "github.com/!burnt!sushi/toml"
        assert encode_module_path("golang.org/x/net") == "golang.org/x/net"

    @pytest.mark.asyncio
    async def test_rubygems(self, registry_transport):
        transport = registry_transport(
            {
                "/api/v1/gems/rails.json": {
                    "version": "7.1.3",
                    "info": "Full-stack web application framework.",
                    "licenses": ["MIT"],
                    "downloads": 500,
                    "version_created_at": "2024-01-16T00:00:00.000Z",
                }
            }
        )

        metadata = await fetch(RubyGemsClient("https://rubygems.org/api/v1/gems"), transport, "rails")

        assert metadata.latest_version == "7.1.3"
        assert metadata.license == "MIT"
        assert metadata.download_count == 500

    @pytest.mark.asyncio
    async def test_generic(self, registry_transport):
        transport = registry_transport({"/thing": {"latest": "3.1.0", "summary": "A thing"}})

        metadata = await fetch(GenericJSONClient("https://example.org"), transport, "thing")

        assert metadata.latest_version == "3.1.0"
        assert metadata.description == "A thing"


def test_get_client_uses_settings(settings):
    client = get_client("pypi", settings)

    assert isinstance(client, PyPIRegistryClient)
    assert client.base_url == "https://pypi.org/pypi"
    assert client.timeout == settings.registry_timeout


def test_get_client_falls_back_to_generic(settings):
    assert isinstance(get_client("hackage", settings), GenericJSONClient)
