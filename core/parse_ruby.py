"""Ruby Gemfile parsing."""

import re

from .models import Manifest, ManifestEntry

# gem "rails", "~> 7.0"  /  gem 'rack'
_RE_GEM = re.compile(r"""^gem\s*\(?\s*(['"])([^'"]+)\1(?:\s*,\s*(['"])([^'"]+)\3)?""")


def parse_gemfile(content: str) -> Manifest:
    """Parse Gemfile content into Manifest.

    Only the first version argument of each ``gem`` line is kept; options
    such as ``require: false`` and further constraints are ignored.

    Args:
        content: The Gemfile content

    Returns:
        Parsed Manifest object
    """
    entries: list[ManifestEntry] = []

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _RE_GEM.match(stripped)
        if match:
            entries.append(ManifestEntry(name=match.group(2), spec=match.group(4), section="gem"))

    return Manifest(ecosystem="ruby", raw=content, entries=entries)
