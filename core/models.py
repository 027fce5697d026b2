"""Core data models for depscout."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ecosystems import EcosystemDescriptor

UNKNOWN_VERSION = "unknown"
LATEST = "latest"


class UpdateType(str, Enum):
    """Severity of an available update."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    UNKNOWN = "unknown"


@dataclass
class ManifestEntry:
    """A single dependency entry in a manifest file."""

    name: str
    spec: str | None = None
    markers: str | None = None
    extras: list[str] | None = None
    section: str = "dependencies"  # dependencies, devDependencies, require, ...

    @property
    def constraint(self) -> str:
        return self.spec or LATEST


@dataclass
class Manifest:
    """A parsed dependency manifest."""

    ecosystem: str  # javascript, rust, python, go, ruby
    raw: str
    entries: list[ManifestEntry]

    def as_dict(self) -> dict[str, str]:
        """Return the ``{name: constraint}`` map; later entries win."""
        return {entry.name: entry.constraint for entry in self.entries}


@dataclass
class RegistryMetadata:
    """Normalized result of a registry lookup."""

    latest_version: str
    is_deprecated: bool = False
    description: str | None = None
    homepage: str | None = None
    repository_url: str | None = None
    license: str | None = None
    deprecation_message: str | None = None
    last_published: str | None = None
    maintainers: list[str] | None = None
    download_count: int | None = None


@dataclass
class PackageUpdateInfo:
    """An available update for one declared dependency."""

    name: str
    current_version: str
    latest_version: str
    ecosystem: str
    package_manager_name: str
    update_type: UpdateType = UpdateType.UNKNOWN
    has_breaking_change: bool = False
    breaking_change_notes: list[str] = field(default_factory=list)
    is_deprecated: bool = False
    metadata: RegistryMetadata | None = None

    @property
    def is_resolved(self) -> bool:
        return self.latest_version != UNKNOWN_VERSION


@dataclass
class AnalysisReport:
    """Outcome of one analysis run."""

    ecosystem: "EcosystemDescriptor | None"
    manifest_path: Path | None = None
    updates: list[PackageUpdateInfo] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    checked: int = 0

    @property
    def project_found(self) -> bool:
        return self.ecosystem is not None

    @property
    def has_breaking_changes(self) -> bool:
        return any(update.has_breaking_change for update in self.updates)


@dataclass
class FailedUpdate:
    """A package whose update command did not succeed."""

    name: str
    reason: str


@dataclass
class UpdateSummary:
    """Report of changes applied through a package manager."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[FailedUpdate] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
