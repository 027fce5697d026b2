"""Apply updates through the project's package manager."""

import asyncio
from pathlib import Path

from .commands import run_command
from .config import Settings, get_settings
from .ecosystems import EcosystemDescriptor, PackageManager
from .errors import ConfirmationRequired, PackageManagerError
from .log import logger
from .models import FailedUpdate, PackageUpdateInfo, UpdateSummary
from .versioning import clean_version


class UpdateExecutor:
    """Runs install commands one package at a time.

    Package managers rewrite the same manifest and lockfile, so commands are
    never run concurrently. A failing package is recorded and the batch
    moves on.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def apply(
        self,
        root_dir: str | Path,
        ecosystem: EcosystemDescriptor,
        updates: list[PackageUpdateInfo],
        *,
        allow_breaking: bool = False,
    ) -> UpdateSummary:
        """Synchronous wrapper around :meth:`apply_async`."""
        return asyncio.run(self.apply_async(root_dir, ecosystem, updates, allow_breaking=allow_breaking))

    async def apply_async(
        self,
        root_dir: str | Path,
        ecosystem: EcosystemDescriptor,
        updates: list[PackageUpdateInfo],
        *,
        allow_breaking: bool = False,
    ) -> UpdateSummary:
        """Install the latest version of each update.

        Args:
            root_dir: Directory holding the manifest
            ecosystem: Ecosystem of the project
            updates: Records produced by the analyzer
            allow_breaking: Confirmation that breaking updates may proceed

        Returns:
            Which packages succeeded, failed or were skipped

        Raises:
            ConfirmationRequired: If a breaking update is selected and
                ``allow_breaking`` is False. Nothing has run at that point.
        """
        breaking = [update.name for update in updates if update.has_breaking_change]
        if breaking and not allow_breaking:
            raise ConfirmationRequired(breaking)

        project_dir = Path(root_dir)
        manager = self.select_package_manager(project_dir, ecosystem)
        summary = UpdateSummary()

        for update in updates:
            if not update.is_resolved:
                logger.info("Skipping {}: latest version unknown", update.name)
                summary.skipped.append(update.name)
                continue

            args = manager.install_args(update.name, clean_version(update.latest_version))
            logger.info("Updating {} to {}", update.name, update.latest_version)
            try:
                await run_command(
                    args,
                    cwd=project_dir,
                    timeout=self.settings.install_timeout,
                    finish_on_cancel=True,
                )
            except PackageManagerError as exc:
                logger.error("Failed to update {}: {}", update.name, exc.reason)
                summary.failed.append(FailedUpdate(update.name, exc.reason))
                continue
            summary.succeeded.append(update.name)

        return summary

    def update_all(self, root_dir: str | Path, ecosystem: EcosystemDescriptor) -> UpdateSummary:
        """Synchronous wrapper around :meth:`update_all_async`."""
        return asyncio.run(self.update_all_async(root_dir, ecosystem))

    async def update_all_async(self, root_dir: str | Path, ecosystem: EcosystemDescriptor) -> UpdateSummary:
        """Refresh every dependency with the package manager's bulk command.

        Multi-step refreshes (``go get -u`` then ``go mod tidy``) stop at the
        first failing step.
        """
        project_dir = Path(root_dir)
        manager = self.select_package_manager(project_dir, ecosystem)
        summary = UpdateSummary()

        for args in manager.update_all_args():
            label = " ".join(args)
            logger.info("Running {}", label)
            try:
                await run_command(
                    args,
                    cwd=project_dir,
                    timeout=self.settings.install_timeout,
                    finish_on_cancel=True,
                )
            except PackageManagerError as exc:
                logger.error("{} failed: {}", label, exc.reason)
                summary.failed.append(FailedUpdate(label, exc.reason))
                break
            summary.succeeded.append(label)

        return summary

    @staticmethod
    def select_package_manager(project_dir: Path, ecosystem: EcosystemDescriptor) -> PackageManager:
        manager = ecosystem.select_package_manager(project_dir)
        logger.debug("Using {} in {}", manager.name, project_dir)
        return manager
