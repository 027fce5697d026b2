"""Node.js package.json parsing."""

import json

from .log import logger
from .models import Manifest, ManifestEntry

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")


def parse_package_json(content: str) -> Manifest:
    """Parse package.json content into Manifest.

    Entries from ``dependencies`` come first, then ``devDependencies``; a
    package declared in both resolves to its devDependencies constraint.

    Args:
        content: The package.json file content

    Returns:
        Parsed Manifest object
    """
    entries: list[ManifestEntry] = []

    try:
        data = json.loads(content) if content.strip() else {}
    except json.JSONDecodeError as exc:
        logger.warning("package.json is not valid JSON: {}", exc)
        return Manifest(ecosystem="javascript", raw=content, entries=entries)

    if not isinstance(data, dict):
        return Manifest(ecosystem="javascript", raw=content, entries=entries)

    for section in DEPENDENCY_SECTIONS:
        declared = data.get(section)
        if not isinstance(declared, dict):
            continue
        for name, spec in declared.items():
            if not isinstance(spec, str):
                logger.debug("Skipping {} entry {} with non-string spec", section, name)
                continue
            entries.append(ManifestEntry(name=name, spec=spec.strip() or None, section=section))

    return Manifest(ecosystem="javascript", raw=content, entries=entries)
