"""Python requirements.txt and pyproject.toml parsing."""

import re
from typing import Any

from packaging.requirements import InvalidRequirement, Requirement

from .log import logger
from .models import Manifest, ManifestEntry
from .toml_lite import load_toml

# Name and optional extras at the start of a requirement line
_RE_NAME_EXTRAS = re.compile(r"^\s*[A-Za-z0-9][A-Za-z0-9._-]*\s*(?:\[[^\]]*\])?")


def _specifier_as_written(line: str) -> str | None:
    """Return the version clauses of ``line`` in their original order."""
    text = _RE_NAME_EXTRAS.sub("", line.split(";", 1)[0], count=1).strip()
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    clauses = ["".join(clause.split()) for clause in text.split(",")]
    return ",".join(clause for clause in clauses if clause) or None


class RequirementsParser:
    """Parser for Python requirements.txt files."""

    def __init__(self):
        # Patterns for lines to skip
        self.skip_patterns = [
            r"^\s*#",  # Comment lines
            r"^\s*$",  # Empty lines
            r"^-e\s+",  # Editable installs
            r"^git\+",  # Git URLs
            r"^hg\+",  # Mercurial URLs
            r"^svn\+",  # SVN URLs
            r"^bzr\+",  # Bazaar URLs
            r"^https?://",  # Direct URLs
            r"^file://",  # File URLs
            r"^\./",  # Local paths
            r"^-r\s+",  # Include other requirements files
            r"^-c\s+",  # Constraint files
            r"^-f\s+",  # Find links
            r"^--",  # Other pip options
        ]

    def _should_skip_line(self, line: str) -> bool:
        """Check if a line should be skipped during parsing."""
        stripped = line.strip()
        if not stripped:
            return True

        return any(re.match(pattern, stripped) for pattern in self.skip_patterns)

    def _parse_requirement_line(self, line: str) -> ManifestEntry | None:
        """Parse a single requirement line using packaging library."""
        # Inline comments are not part of the requirement
        line_for_parsing = line.split(" #")[0].split("\t#")[0].strip()
        if not line_for_parsing:
            return None

        try:
            req = Requirement(line_for_parsing)
        except InvalidRequirement:
            logger.debug("Skipping malformed requirement line: {}", line_for_parsing)
            return None

        if req.url:
            # name @ https://... is not a registry dependency
            return None

        spec = None
        if req.specifier:
            # SpecifierSet sorts its clauses; keep the manifest order
            spec = _specifier_as_written(line_for_parsing) or str(req.specifier)

        return ManifestEntry(
            name=req.name,
            spec=spec,
            markers=str(req.marker) if req.marker else None,
            extras=sorted(req.extras) if req.extras else None,
            section="requirements",
        )

    def parse(self, content: str) -> Manifest:
        """Parse requirements.txt content into Manifest."""
        lines = content.splitlines()
        entries: list[ManifestEntry] = []

        for line in lines:
            if self._should_skip_line(line):
                continue

            entry = self._parse_requirement_line(line)
            if entry:
                entries.append(entry)

        return Manifest(ecosystem="python", raw=content, entries=entries)


class PyprojectParser:
    """Parser for pyproject.toml dependency tables.

    Reads Poetry tables (``[tool.poetry.dependencies]``, the legacy
    ``dev-dependencies`` table and ``[tool.poetry.group.*.dependencies]``)
    and PEP 621 ``[project].dependencies``. The ``python`` key of Poetry
    tables describes interpreter compatibility and is never a package.
    """

    def __init__(self):
        self._requirements = RequirementsParser()

    def _poetry_entries(self, table: Any, section: str) -> list[ManifestEntry]:
        if not isinstance(table, dict):
            return []

        entries = []
        for name, spec in table.items():
            if name.lower() == "python":
                continue
            if isinstance(spec, str):
                entries.append(ManifestEntry(name=name, spec=spec.strip() or None, section=section))
            elif isinstance(spec, dict) and isinstance(spec.get("version"), str):
                entries.append(
                    ManifestEntry(
                        name=name,
                        spec=spec["version"].strip() or None,
                        markers=spec.get("markers") if isinstance(spec.get("markers"), str) else None,
                        extras=[e for e in spec.get("extras", []) if isinstance(e, str)] or None,
                        section=section,
                    )
                )
            else:
                # git/path/url dependencies have no registry version
                logger.debug("Skipping non-registry Poetry dependency {}", name)
        return entries

    def _pep621_entries(self, dependencies: Any) -> list[ManifestEntry]:
        if not isinstance(dependencies, list):
            return []

        entries = []
        for item in dependencies:
            if not isinstance(item, str):
                continue
            entry = self._requirements._parse_requirement_line(item)
            if entry:
                entry.section = "project.dependencies"
                entries.append(entry)
        return entries

    def parse(self, content: str) -> Manifest:
        """Parse pyproject.toml content into Manifest."""
        data = load_toml(content)
        entries: list[ManifestEntry] = []

        project = data.get("project")
        if isinstance(project, dict):
            entries.extend(self._pep621_entries(project.get("dependencies")))

        tool = data.get("tool")
        poetry = tool.get("poetry") if isinstance(tool, dict) else None
        if isinstance(poetry, dict):
            entries.extend(self._poetry_entries(poetry.get("dependencies"), "tool.poetry.dependencies"))
            entries.extend(self._poetry_entries(poetry.get("dev-dependencies"), "tool.poetry.dev-dependencies"))
            groups = poetry.get("group")
            if isinstance(groups, dict):
                for group_name, group in groups.items():
                    if isinstance(group, dict):
                        entries.extend(
                            self._poetry_entries(
                                group.get("dependencies"),
                                f"tool.poetry.group.{group_name}.dependencies",
                            )
                        )

        return Manifest(ecosystem="python", raw=content, entries=entries)


def parse_requirements(content: str) -> Manifest:
    """Parse requirements.txt content into Manifest.

    Args:
        content: The requirements.txt file content

    Returns:
        Parsed Manifest object
    """
    parser = RequirementsParser()
    return parser.parse(content)


def parse_pyproject(content: str) -> Manifest:
    """Parse pyproject.toml content into Manifest.

    Args:
        content: The pyproject.toml file content

    Returns:
        Parsed Manifest object
    """
    return PyprojectParser().parse(content)
