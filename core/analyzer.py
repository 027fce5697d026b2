"""Update analysis: which declared dependencies have newer releases."""

import asyncio
from collections.abc import Iterable
from pathlib import Path

import httpx

from .commands import lookup_latest_via_cli
from .config import Settings, get_settings
from .detect import locate_manifest
from .ecosystems import DEFAULT_ECOSYSTEM_ID, EcosystemDescriptor, get_ecosystem
from .errors import ManifestUnreadable, RegistryUnavailable
from .log import logger
from .models import LATEST, UNKNOWN_VERSION, AnalysisReport, PackageUpdateInfo, RegistryMetadata
from .parse import parse_manifest
from .registries import RegistryClient, get_client
from .versioning import classify_update, clean_version


class UpdateAnalyzer:
    """Compares manifest declarations against registry latest versions."""

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the analyzer.

        Args:
            settings: Runtime settings; defaults to the environment
            transport: Optional httpx transport, used by tests to mock registries
        """
        self.settings = settings or get_settings()
        self.transport = transport

    def analyze(self, root_dir: str | Path, target_packages: Iterable[str] | None = None) -> AnalysisReport:
        """Synchronous wrapper around :meth:`analyze_async`."""
        return asyncio.run(self.analyze_async(root_dir, target_packages))

    async def analyze_async(
        self, root_dir: str | Path, target_packages: Iterable[str] | None = None
    ) -> AnalysisReport:
        """Analyze the project rooted at ``root_dir``.

        Args:
            root_dir: Project directory
            target_packages: Restrict the check to these names

        Returns:
            The analysis report; ``report.ecosystem`` is None when no
            supported project was found and no packages were named

        Raises:
            ManifestUnreadable: If the detected manifest cannot be read
        """
        root = Path(root_dir)
        targets = split_package_names(target_packages)

        found = locate_manifest(root)
        if found is None:
            if not targets:
                return AnalysisReport(ecosystem=None)
            # Named packages without a project are looked up on npm
            ecosystem = get_ecosystem(DEFAULT_ECOSYSTEM_ID)
            logger.info("No manifest found; checking {} on {}", ", ".join(targets), ecosystem.registry_id)
            return await self.analyze_declarations(
                ecosystem, {name: LATEST for name in targets}, project_dir=root
            )

        try:
            contents = found.path.read_bytes()
        except OSError as exc:
            raise ManifestUnreadable(found.path, exc.strerror or str(exc)) from exc

        declarations = parse_manifest(found.ecosystem.id, contents, found.path.name)
        logger.info("Parsed {} dependencies from {}", len(declarations), found.path)

        report = await self.analyze_declarations(
            found.ecosystem, declarations, targets or None, project_dir=found.project_dir
        )
        report.manifest_path = found.path
        return report

    async def analyze_declarations(
        self,
        ecosystem: EcosystemDescriptor,
        declarations: dict[str, str],
        target_packages: Iterable[str] | None = None,
        project_dir: str | Path | None = None,
    ) -> AnalysisReport:
        """Check an already-parsed ``{name: constraint}`` map.

        Records come back in declaration order. Packages already at their
        latest version are omitted.
        """
        targets = split_package_names(target_packages)
        not_found: list[str] = []
        if targets:
            wanted = set(targets)
            not_found = [name for name in targets if name not in declarations]
            selected = {name: spec for name, spec in declarations.items() if name in wanted}
        else:
            selected = dict(declarations)

        for name in not_found:
            logger.warning("{} is not declared in the manifest", name)

        report = AnalysisReport(ecosystem=ecosystem, not_found=not_found, checked=len(selected))
        if not selected:
            return report

        client = get_client(ecosystem.registry_id, self.settings)
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async with httpx.AsyncClient(transport=self.transport, follow_redirects=True) as http:
            lookups = await asyncio.gather(
                *(
                    self._lookup(http, client, semaphore, ecosystem, name, project_dir)
                    for name in selected
                )
            )

        for (name, constraint), (latest, metadata) in zip(selected.items(), lookups):
            update = self._build_update(ecosystem, name, constraint, latest, metadata)
            if update is not None:
                report.updates.append(update)

        logger.info(
            "{} of {} {} packages have updates",
            len(report.updates),
            len(selected),
            ecosystem.display_name,
        )
        return report

    async def _lookup(
        self,
        http: httpx.AsyncClient,
        client: RegistryClient,
        semaphore: asyncio.Semaphore,
        ecosystem: EcosystemDescriptor,
        name: str,
        project_dir: str | Path | None,
    ) -> tuple[str, RegistryMetadata | None]:
        async with semaphore:
            try:
                metadata = await client.fetch_latest(http, name)
                return metadata.latest_version, metadata
            except RegistryUnavailable as exc:
                logger.warning("{}", exc)

            if self.settings.cli_fallback:
                version = await lookup_latest_via_cli(ecosystem, name, self.settings, cwd=project_dir)
                if version:
                    return version, None

        return UNKNOWN_VERSION, None

    @staticmethod
    def _build_update(
        ecosystem: EcosystemDescriptor,
        name: str,
        constraint: str,
        latest: str,
        metadata: RegistryMetadata | None,
    ) -> PackageUpdateInfo | None:
        current = clean_version(constraint)
        if latest[:1] == "v" and current[:1].isdigit():
            # Go reports tags with a v prefix; show both sides the same way
            current = f"v{current}"
        update = PackageUpdateInfo(
            name=name,
            current_version=current,
            latest_version=latest,
            ecosystem=ecosystem.id,
            package_manager_name=ecosystem.package_manager_name,
            is_deprecated=metadata.is_deprecated if metadata else False,
            metadata=metadata,
        )
        if latest == UNKNOWN_VERSION:
            # Unresolved lookups are reported but never classified
            return update

        classification = classify_update(current, latest)
        if classification is None:
            return None

        update.update_type = classification.update_type
        update.has_breaking_change = classification.has_breaking_change
        update.breaking_change_notes = list(classification.notes)
        return update


def split_package_names(names: Iterable[str] | None) -> list[str]:
    """Split comma-separated package arguments into unique names, in order.

    ``["chalk,ora", "react"]`` -> ``["chalk", "ora", "react"]``.
    """
    if not names:
        return []
    split = (part.strip() for name in names if name for part in name.split(","))
    return list(dict.fromkeys(part for part in split if part))


def analyze(
    root_dir: str | Path,
    target_packages: Iterable[str] | None = None,
    settings: Settings | None = None,
) -> list[PackageUpdateInfo]:
    """Return the available updates for the project at ``root_dir``."""
    return UpdateAnalyzer(settings).analyze(root_dir, target_packages).updates


__all__ = ["UpdateAnalyzer", "analyze", "split_package_names"]
