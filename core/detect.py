"""Ecosystem detection for dependency manifests."""

import re
from dataclasses import dataclass
from pathlib import Path

from .ecosystems import MANIFEST_PRIORITY, EcosystemDescriptor, ecosystem_for_manifest
from .log import logger

# Directories that never hold the project's own manifest
_IGNORED_DIRS = {"node_modules", "target", "vendor", "__pycache__", "venv"}


@dataclass(frozen=True)
class ProjectManifest:
    """The manifest chosen for a project directory."""

    ecosystem: EcosystemDescriptor
    path: Path

    @property
    def project_dir(self) -> Path:
        return self.path.parent


def _find_in(directory: Path) -> ProjectManifest | None:
    for filename in MANIFEST_PRIORITY:
        candidate = directory / filename
        if candidate.is_file():
            descriptor = ecosystem_for_manifest(filename)
            if descriptor:
                return ProjectManifest(ecosystem=descriptor, path=candidate)
    return None


def locate_manifest(root_dir: str | Path) -> ProjectManifest | None:
    """Find the highest-priority manifest under ``root_dir``.

    The root itself is checked first; failing that, each immediate
    subdirectory (in name order) gets the same check. Deeper levels are
    never searched.

    Args:
        root_dir: Project directory

    Returns:
        The located manifest, or None when no supported project exists
    """
    root = Path(root_dir)
    if not root.is_dir():
        logger.debug("{} is not a directory", root)
        return None

    found = _find_in(root)
    if found:
        logger.debug("Detected {} via {}", found.ecosystem.id, found.path.name)
        return found

    try:
        children = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as exc:
        logger.warning("Could not list {}: {}", root, exc)
        return None

    for child in children:
        if child.name.startswith(".") or child.name in _IGNORED_DIRS:
            continue
        found = _find_in(child)
        if found:
            logger.debug("Detected {} in subdirectory {}", found.ecosystem.id, child.name)
            return found

    logger.info("No supported project found in {}", root)
    return None


def detect(root_dir: str | Path) -> EcosystemDescriptor | None:
    """Return the active ecosystem of ``root_dir``, or None."""
    found = locate_manifest(root_dir)
    return found.ecosystem if found else None


def identify(content: str, filename: str | None = None) -> str:
    """Detect ecosystem from content and filename hints.

    Args:
        content: The manifest file content
        filename: Optional filename for additional context

    Returns:
        Detected ecosystem id ('javascript', 'rust', 'python', 'go', 'ruby')
        or 'unknown'
    """
    # Filename-based detection (takes precedence)
    if filename:
        descriptor = ecosystem_for_manifest(filename)
        if descriptor:
            return descriptor.id

    # Content-based detection
    if re.search(r'"(?:dependencies|devDependencies)"\s*:', content):
        return "javascript"

    if re.search(r"^module\s+\S+", content, re.MULTILINE) and re.search(
        r"^require\b", content, re.MULTILINE
    ):
        return "go"

    if re.search(r"^\[(?:dev-|build-)?dependencies\]", content, re.MULTILINE) or re.search(
        r"^\[package\]", content, re.MULTILINE
    ):
        return "rust"

    if re.search(r"^\[(?:tool\.poetry|project)(?:\.[^\]]*)?\]", content, re.MULTILINE):
        return "python"

    if re.search(r"""^\s*gem\s+['"]""", content, re.MULTILINE) or re.search(
        r"^source\s+['\"]https://rubygems", content, re.MULTILINE
    ):
        return "ruby"

    python_patterns = [
        r"^[a-zA-Z0-9\-_.]+\s*[><=!~]+\s*[\d\w\.\-]+",  # package>=1.0.0
        r"^[a-zA-Z0-9\-_.]+\[.*?\]\s*[><=!~]+",  # package[extras]>=1.0.0
        r";\s*(?:sys_platform|python_version)",  # environment markers
    ]

    for pattern in python_patterns:
        if re.search(pattern, content, re.MULTILINE):
            return "python"

    return "unknown"
