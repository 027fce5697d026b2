"""Tests for the update analyzer."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from core.analyzer import UpdateAnalyzer, analyze
from core.config import Settings
from core.ecosystems import get_ecosystem
from core.errors import ManifestUnreadable
from core.models import UpdateType


def write_package_json(directory, dependencies):
    (directory / "package.json").write_text(json.dumps({"dependencies": dependencies}))


class TestUpdateAnalyzer:
    """Test analysis of projects against mocked registries."""

    @pytest.mark.asyncio
    async def test_minor_update_end_to_end(self, tmp_path, settings, registry_transport):
        """left-pad 1.0.0 with latest 1.3.0 is a non-breaking minor update."""
        write_package_json(tmp_path, {"left-pad": "1.0.0"})
        transport = registry_transport({"/left-pad": {"dist-tags": {"latest": "1.3.0"}}})

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        assert report.ecosystem.id == "javascript"
        assert report.manifest_path == tmp_path / "package.json"
        assert len(report.updates) == 1
        update = report.updates[0]
        assert update.name == "left-pad"
        assert update.current_version == "1.0.0"
        assert update.latest_version == "1.3.0"
        assert update.update_type == UpdateType.MINOR
        assert update.has_breaking_change is False
        assert update.package_manager_name == "npm/pnpm/yarn"

    @pytest.mark.asyncio
    async def test_major_deprecated_end_to_end(self, tmp_path, settings, registry_transport):
        """A major bump on a deprecated package is breaking and deprecated."""
        write_package_json(tmp_path, {"left-pad": "1.0.0"})
        transport = registry_transport(
            {"/left-pad": {"dist-tags": {"latest": "2.0.0"}, "deprecated": "use String.prototype.padStart"}}
        )

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        update = report.updates[0]
        assert update.update_type == UpdateType.MAJOR
        assert update.has_breaking_change is True
        assert update.is_deprecated is True
        assert update.metadata.deprecation_message == "use String.prototype.padStart"
        assert report.has_breaking_changes is True

    @pytest.mark.asyncio
    async def test_current_packages_omitted(self, tmp_path, settings, registry_transport):
        """A package already at latest produces no record."""
        write_package_json(tmp_path, {"left-pad": "^1.3.0", "chalk": "4.1.2"})
        transport = registry_transport(
            {
                "/left-pad": {"dist-tags": {"latest": "1.3.0"}},
                "/chalk": {"dist-tags": {"latest": "5.3.0"}},
            }
        )

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        assert [u.name for u in report.updates] == ["chalk"]
        assert report.checked == 2

    @pytest.mark.asyncio
    async def test_unreachable_registry_degrades_to_unknown(self, tmp_path, settings, registry_transport):
        """A failed lookup yields latest 'unknown' without aborting the batch."""
        write_package_json(tmp_path, {"left-pad": "1.0.0", "chalk": "4.1.2"})
        transport = registry_transport(
            {
                "/left-pad": httpx.ConnectError("connection refused"),
                "/chalk": {"dist-tags": {"latest": "4.1.3"}},
            }
        )

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        assert [u.name for u in report.updates] == ["left-pad", "chalk"]
        failed, ok = report.updates
        assert failed.latest_version == "unknown"
        assert failed.update_type == UpdateType.UNKNOWN
        assert failed.has_breaking_change is False
        assert failed.is_resolved is False
        assert ok.update_type == UpdateType.PATCH

    @pytest.mark.asyncio
    async def test_cli_fallback_used_when_registry_fails(self, tmp_path, registry_transport):
        """The package manager CLI answers when the registry does not."""
        write_package_json(tmp_path, {"left-pad": "1.0.0"})
        settings = Settings(_env_file=None, cli_fallback=True)

        with patch("core.analyzer.lookup_latest_via_cli", new=AsyncMock(return_value="1.3.0")) as mock_cli:
            report = await UpdateAnalyzer(settings, registry_transport({})).analyze_async(tmp_path)

        mock_cli.assert_awaited_once()
        assert mock_cli.await_args.args[:2] == (get_ecosystem("javascript"), "left-pad")
        assert report.updates[0].latest_version == "1.3.0"
        assert report.updates[0].metadata is None

    @pytest.mark.asyncio
    async def test_target_packages_and_not_found(self, tmp_path, settings, registry_transport):
        """Only named packages are checked; undeclared names are reported."""
        write_package_json(tmp_path, {"left-pad": "1.0.0", "chalk": "4.1.2"})
        transport = registry_transport({"/chalk": {"dist-tags": {"latest": "5.0.0"}}})

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path, ["chalk", "react"])

        assert [u.name for u in report.updates] == ["chalk"]
        assert report.not_found == ["react"]
        assert transport.seen == ["/chalk"]

    @pytest.mark.asyncio
    async def test_comma_separated_targets(self, tmp_path, settings, registry_transport):
        write_package_json(tmp_path, {"left-pad": "1.0.0", "chalk": "4.1.2"})
        transport = registry_transport({"/chalk": {"dist-tags": {"latest": "5.0.0"}}})

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path, ["chalk,react", " chalk "])

        assert [u.name for u in report.updates] == ["chalk"]
        assert report.not_found == ["react"]

    @pytest.mark.asyncio
    async def test_malformed_registry_payload_does_not_abort_batch(self, tmp_path, settings, registry_transport):
        """One unusable registry answer leaves the other lookups intact."""
        write_package_json(tmp_path, {"left-pad": "1.0.0", "chalk": "4.1.2"})
        transport = registry_transport(
            {
                "/left-pad": {"dist-tags": {"latest": "1.3.0"}, "maintainers": 5},
                "/chalk": {"dist-tags": {"latest": "5.0.0"}},
            }
        )

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        left_pad, chalk = report.updates
        assert left_pad.latest_version == "unknown"
        assert left_pad.is_resolved is False
        assert chalk.update_type == UpdateType.MAJOR

    @pytest.mark.asyncio
    async def test_go_versions_keep_v_prefix(self, tmp_path, settings, registry_transport):
        (tmp_path / "go.mod").write_text("module example.com/app\n\nrequire github.com/spf13/cobra v1.7.0\n")
        transport = registry_transport({"/github.com/spf13/cobra/@latest": {"Version": "v1.8.1"}})

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        update = report.updates[0]
        assert update.current_version == "v1.7.0"
        assert update.latest_version == "v1.8.1"
        assert update.update_type == UpdateType.MINOR

    @pytest.mark.asyncio
    async def test_no_project_without_targets(self, tmp_path, settings):
        """An empty directory reports no supported project."""
        report = await UpdateAnalyzer(settings).analyze_async(tmp_path)

        assert report.project_found is False
        assert report.updates == []

    @pytest.mark.asyncio
    async def test_no_project_with_targets_uses_npm(self, tmp_path, settings, registry_transport):
        """Named packages without a manifest are looked up on npm as 'latest'."""
        transport = registry_transport({"/express": {"dist-tags": {"latest": "4.19.2"}}})

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path, ["express"])

        assert report.ecosystem.id == "javascript"
        assert report.manifest_path is None
        update = report.updates[0]
        assert update.current_version == "latest"
        assert update.latest_version == "4.19.2"

    @pytest.mark.asyncio
    async def test_unreadable_manifest_raises(self, tmp_path, settings):
        """A manifest that exists but cannot be read is a hard error."""
        write_package_json(tmp_path, {"left-pad": "1.0.0"})

        with patch("pathlib.Path.read_bytes", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(ManifestUnreadable, match="Permission denied"):
                await UpdateAnalyzer(settings).analyze_async(tmp_path)

    @pytest.mark.asyncio
    async def test_lookups_are_bounded_and_ordered(self, tmp_path, registry_transport):
        """Concurrency never exceeds the limit and output keeps manifest order."""
        names = [f"pkg-{i}" for i in range(8)]
        write_package_json(tmp_path, {name: "1.0.0" for name in names})
        settings = Settings(_env_file=None, cli_fallback=False, max_concurrency=3)
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            name = request.url.path.lstrip("/")
            # Later packages finish first
            await asyncio.sleep(0.01 * (8 - int(name.split("-")[1])))
            in_flight -= 1
            return httpx.Response(200, json={"dist-tags": {"latest": "1.1.0"}})

        report = await UpdateAnalyzer(settings, httpx.MockTransport(handler)).analyze_async(tmp_path)

        assert peak <= 3
        assert [u.name for u in report.updates] == names

    @pytest.mark.asyncio
    async def test_python_project(self, tmp_path, settings, registry_transport):
        """requirements.txt projects go through PyPI."""
        (tmp_path / "requirements.txt").write_text("fastapi==0.85.0\nrequests\n")
        transport = registry_transport(
            {
                "/pypi/fastapi/json": {"info": {"version": "0.115.0"}},
                "/pypi/requests/json": {"info": {"version": "2.32.3"}},
            }
        )

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        fastapi, requests = report.updates
        assert fastapi.update_type == UpdateType.MINOR
        assert requests.current_version == "latest"
        assert requests.has_breaking_change is True

    @pytest.mark.asyncio
    async def test_compound_python_range_uses_lower_bound(self, tmp_path, settings, registry_transport):
        """django>=4.2.0,<5.0.0 against 5.1.0 is a major, breaking update."""
        (tmp_path / "requirements.txt").write_text("django>=4.2.0,<5.0.0\nrequests>=2.28.0,<3\n")
        transport = registry_transport(
            {
                "/pypi/django/json": {"info": {"version": "5.1.0"}},
                "/pypi/requests/json": {"info": {"version": "2.32.3"}},
            }
        )

        report = await UpdateAnalyzer(settings, transport).analyze_async(tmp_path)

        django, requests = report.updates
        assert django.current_version == "4.2.0"
        assert django.update_type == UpdateType.MAJOR
        assert django.has_breaking_change is True
        assert requests.current_version == "2.28.0"
        assert requests.update_type == UpdateType.MINOR


def test_sync_analyze_wrapper(tmp_path, settings):
    """The module-level helper returns the update list."""
    write_package_json(tmp_path, {})

    assert analyze(tmp_path, settings=settings) == []
