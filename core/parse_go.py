"""Go go.mod parsing."""

import re

from .models import Manifest, ManifestEntry

_RE_REQUIRE_LINE = re.compile(r"^require\s+(\S+)\s+(\S+)")
_RE_BLOCK_LINE = re.compile(r"^(\S+)\s+(\S+)")


def _strip_comment(line: str) -> str:
    return line.split("//", 1)[0].strip()


def parse_go_mod(content: str) -> Manifest:
    """Parse go.mod content into Manifest.

    Recognizes single ``require module version`` lines and parenthesized
    ``require ( ... )`` blocks and merges both into one entry list.
    ``// indirect`` markers are dropped.

    Args:
        content: The go.mod file content

    Returns:
        Parsed Manifest object
    """
    entries: list[ManifestEntry] = []
    in_require = False

    for raw_line in content.splitlines():
        line = _strip_comment(raw_line)
        if not line:
            continue

        if in_require:
            if line.startswith(")"):
                in_require = False
                continue
            match = _RE_BLOCK_LINE.match(line)
            if match:
                entries.append(ManifestEntry(name=match.group(1), spec=match.group(2), section="require"))
            continue

        if re.match(r"^require\s*\($", line):
            in_require = True
            continue

        match = _RE_REQUIRE_LINE.match(line)
        if match and match.group(1) != "(":
            entries.append(ManifestEntry(name=match.group(1), spec=match.group(2), section="require"))

    return Manifest(ecosystem="go", raw=content, entries=entries)
