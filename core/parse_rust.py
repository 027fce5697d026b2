"""Rust Cargo.toml parsing."""

from typing import Any

from .log import logger
from .models import Manifest, ManifestEntry
from .toml_lite import load_toml

DEPENDENCY_TABLES = ("dependencies", "dev-dependencies", "build-dependencies")


def _entry_from_spec(name: str, spec: Any, section: str) -> ManifestEntry | None:
    """Build an entry from ``"1.0"`` or ``{ version = "1.0", ... }``."""
    if isinstance(spec, str):
        return ManifestEntry(name=name, spec=spec.strip() or None, section=section)
    if isinstance(spec, dict):
        version = spec.get("version")
        if isinstance(version, str):
            features = spec.get("features")
            if not isinstance(features, list):
                features = []
            return ManifestEntry(
                name=name,
                spec=version.strip() or None,
                extras=[f for f in features if isinstance(f, str)] or None,
                section=section,
            )
    # path, git and workspace dependencies carry no registry version
    logger.debug("Skipping Cargo dependency {} without a version", name)
    return None


def parse_cargo_toml(content: str) -> Manifest:
    """Parse Cargo.toml content into Manifest.

    Handles both ``serde = "1.0"`` and
    ``tokio = { version = "1.28", features = ["full"] }`` forms, as well as
    ``[dependencies.serde]`` sub-tables carrying a ``version`` key.

    Args:
        content: The Cargo.toml file content

    Returns:
        Parsed Manifest object
    """
    data = load_toml(content)
    entries: list[ManifestEntry] = []

    for section in DEPENDENCY_TABLES:
        table = data.get(section)
        if not isinstance(table, dict):
            continue
        for name, spec in table.items():
            entry = _entry_from_spec(name, spec, section)
            if entry:
                entries.append(entry)

    return Manifest(ecosystem="rust", raw=content, entries=entries)
